"""GitHub repository publishing and Pages enablement."""
import logging
from typing import Optional
from github import Auth, Github, GithubException
import httpx

from errors import PublishConflictError, PublishError
from models import RepositoryFile

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
CONFLICT_STATUSES = (409, 412)


def repo_url(owner: str, name: str) -> str:
    return f"https://github.com/{owner}/{name}"


def pages_url(owner: str, name: str) -> str:
    return f"https://{owner}.github.io/{name}/"


class GitHubService:
    """Handle GitHub repository operations and Pages deployment."""

    def __init__(
        self,
        token: str,
        branch: str = "main",
        github: Optional[Github] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """Initialize GitHub client."""
        self.token = token
        self.branch = branch
        self.github = github or Github(auth=Auth.Token(token))
        self.transport = transport
        self._login: Optional[str] = None

    def get_login(self) -> str:
        """Login of the account the token belongs to."""
        if self._login is None:
            try:
                self._login = self.github.get_user().login
            except GithubException as e:
                raise PublishError(f"Could not resolve GitHub user: {e}") from e
            logger.info(f"Authenticated as {self._login}")
        return self._login

    def _get_repo(self, name: str):
        try:
            return self.github.get_repo(f"{self.get_login()}/{name}")
        except GithubException as e:
            raise PublishError(f"Repository {name} not available: {e}") from e

    def create_project(self, name: str, private: bool = False) -> str:
        """Create a repository for the task and return its URL."""
        logger.info(f"Creating repository: {name}")
        try:
            repo = self.github.get_user().create_repo(
                name=name,
                description=f"Auto-generated application: {name}",
                private=private,
                auto_init=False
            )
        except GithubException as e:
            # 422 here usually means the name is already taken
            raise PublishError(f"Could not create repository {name}: {e}") from e

        logger.info(f"Repository created: {repo.html_url}")
        return repo.html_url

    def upsert_file(
        self,
        name: str,
        path: str,
        content: str,
        message: str,
        sha: Optional[str] = None
    ) -> None:
        """
        Write a file as one commit.

        Without ``sha`` the file is created. With ``sha`` the existing file is
        replaced only if ``sha`` is still its current version.
        """
        repo = self._get_repo(name)
        try:
            if sha is None:
                repo.create_file(
                    path=path,
                    message=message,
                    content=content,
                    branch=self.branch
                )
                logger.info(f"  Created: {path}")
            else:
                repo.update_file(
                    path=path,
                    message=message,
                    content=content,
                    sha=sha,
                    branch=self.branch
                )
                logger.info(f"  Updated: {path}")
        except GithubException as e:
            if sha is not None and e.status in CONFLICT_STATUSES:
                raise PublishConflictError(
                    f"{path} in {name} changed since sha {sha[:7]}"
                ) from e
            raise PublishError(f"Error uploading {path} to {name}: {e}") from e

    def get_file(self, name: str, path: str) -> RepositoryFile:
        """Read a file and its current version token."""
        repo = self._get_repo(name)
        try:
            contents = repo.get_contents(path, ref=self.branch)
        except GithubException as e:
            raise PublishError(f"Could not read {path} from {name}: {e}") from e
        if isinstance(contents, list):
            raise PublishError(f"{path} in {name} is a directory")

        return RepositoryFile(
            path=contents.path,
            content=contents.decoded_content.decode("utf-8"),
            sha=contents.sha
        )

    def get_latest_commit(self, name: str, branch: Optional[str] = None) -> str:
        """Head commit sha of ``branch``."""
        repo = self._get_repo(name)
        try:
            commit_sha = repo.get_branch(branch or self.branch).commit.sha
        except GithubException as e:
            raise PublishError(f"Could not read latest commit of {name}: {e}") from e

        logger.info(f"Commit SHA: {commit_sha}")
        return commit_sha

    def enable_pages(self, name: str, branch: Optional[str] = None, path: str = "/") -> str:
        """Enable GitHub Pages for the repository and return its URL."""
        logger.info("Enabling GitHub Pages...")
        owner = self.get_login()

        # PyGithub has limited Pages support, use the REST API directly
        url = f"{GITHUB_API_URL}/repos/{owner}/{name}/pages"
        headers = {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json"
        }
        data = {
            "source": {
                "branch": branch or self.branch,
                "path": path
            }
        }

        try:
            with httpx.Client(timeout=30.0, transport=self.transport) as client:
                response = client.post(url, json=data, headers=headers)
        except httpx.HTTPError as e:
            raise PublishError(f"Error enabling Pages for {name}: {e}") from e

        if response.status_code not in (201, 409):  # 409 = already enabled
            raise PublishError(
                f"Pages API response {response.status_code}: {response.text[:200]}"
            )

        site_url = pages_url(owner, name)
        logger.info(f"GitHub Pages enabled: {site_url}")
        return site_url

"""Round-based build, revise and notify pipeline."""
import asyncio
import logging
from typing import Awaitable, Callable, Dict

from models import EvaluationNotification, Round, TaskRequest
from services.documents import generate_mit_license, generate_readme
from services.github_service import pages_url, repo_url
from services.llm_generator import (
    build_initial_prompt,
    build_revision_prompt,
    describe_attachment,
    strip_code_fence,
)

logger = logging.getLogger(__name__)

INDEX_PATH = "index.html"
README_PATH = "README.md"
LICENSE_PATH = "LICENSE"


class BuildOrchestrator:
    """Run one round for a task and report the deployment."""

    def __init__(
        self,
        generator,
        publisher,
        notifier,
        propagation_delay: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.generator = generator
        self.publisher = publisher
        self.notifier = notifier
        self.propagation_delay = propagation_delay
        self.sleep = sleep
        self._handlers: Dict[Round, Callable[[TaskRequest, str], Awaitable[None]]] = {
            Round.BUILD: self._build,
            Round.REVISE: self._revise,
        }
        missing = set(Round) - set(self._handlers)
        if missing:
            raise ValueError(f"No handler for rounds: {sorted(missing)}")

    async def run(self, request: TaskRequest) -> bool:
        """
        Execute ``request.round`` and notify the evaluation server.

        Any error from generation or publishing propagates and the
        notification is never sent. Returns whether delivery succeeded.
        """
        round_ = Round(request.round)
        logger.info(f"Processing task: {request.task}, round {round_.value} ({round_.name})")

        login = await asyncio.to_thread(self.publisher.get_login)
        await self._handlers[round_](request, login)

        commit_sha = await asyncio.to_thread(
            self.publisher.get_latest_commit, request.task
        )
        site_url = pages_url(login, request.task)

        if round_ is Round.BUILD:
            logger.info(
                f"Deployment URL (will be active shortly): {site_url}; "
                f"waiting {self.propagation_delay:g}s"
            )
            await self.sleep(self.propagation_delay)
        else:
            logger.info(f"Redeployment triggered for URL: {site_url}")

        notification = EvaluationNotification(
            email=request.email,
            task=request.task,
            round=round_.value,
            nonce=request.nonce,
            repo_url=repo_url(login, request.task),
            commit_sha=commit_sha,
            pages_url=site_url,
        )
        return await self.notifier.notify_evaluation_server(
            evaluation_url=request.evaluation_url,
            notification=notification,
        )

    async def _generate(self, prompt: str) -> str:
        raw = await asyncio.to_thread(self.generator.generate, prompt)
        return strip_code_fence(raw)

    async def _build(self, request: TaskRequest, login: str) -> None:
        attachment_context = describe_attachment(request.attachments)
        prompt = build_initial_prompt(request.brief, request.checks, attachment_context)

        logger.info("Step 1: Generating application with LLM...")
        html = await self._generate(prompt)

        logger.info("Step 2: Creating new GitHub repository...")
        await asyncio.to_thread(self.publisher.create_project, request.task, False)

        message = "Initial commit: Add application files"
        files = {
            INDEX_PATH: html,
            README_PATH: generate_readme(request.task, request.brief),
            LICENSE_PATH: generate_mit_license(login),
        }
        logger.info(f"Uploading {len(files)} files...")
        for path, content in files.items():
            await asyncio.to_thread(
                self.publisher.upsert_file, request.task, path, content, message
            )

        await asyncio.to_thread(self.publisher.enable_pages, request.task, None, "/")

    async def _revise(self, request: TaskRequest, login: str) -> None:
        logger.info(f"Fetching existing code from {login}/{request.task}...")
        existing = await asyncio.to_thread(
            self.publisher.get_file, request.task, INDEX_PATH
        )

        logger.info("Step 1: Generating revised application with LLM...")
        html = await self._generate(build_revision_prompt(existing.content, request.brief))

        logger.info("Step 2: Updating existing repository...")
        await asyncio.to_thread(
            self.publisher.upsert_file,
            request.task,
            INDEX_PATH,
            html,
            f"Update application (round {int(request.round)})",
            existing.sha,
        )

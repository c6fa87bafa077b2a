import os
import sys

import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("STUDENT_SECRET", "s3cret")
os.environ.setdefault("GITHUB_TOKEN", "ghp_test")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")

from config import get_settings  # noqa: E402
from models import TaskRequest  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_request():
    def _make(**overrides):
        data = {
            "email": "student@example.com",
            "secret": "s3cret",
            "task": "markdown-viewer",
            "round": 1,
            "nonce": "n-123",
            "brief": "Render the markdown from the attached file.",
            "checks": [
                "Page has a <title> containing 'Viewer'",
                "#output contains rendered HTML",
            ],
            "evaluation_url": "https://eval.example.com/notify",
            "attachments": [],
        }
        data.update(overrides)
        return TaskRequest(**data)
    return _make

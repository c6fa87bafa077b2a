"""Pydantic models for request/response validation."""
from enum import IntEnum
from pydantic import BaseModel
from typing import List, Optional


class Round(IntEnum):
    """Processing mode for a task."""
    BUILD = 1
    REVISE = 2


class Attachment(BaseModel):
    """File attachment, usually a data URI."""
    name: str
    url: str  # data:mime/type;base64,... or a remote URL


class TaskRequest(BaseModel):
    """Incoming build request."""
    email: str
    secret: str
    task: str
    round: Round
    nonce: str
    brief: str
    checks: List[str] = []
    evaluation_url: str
    attachments: Optional[List[Attachment]] = []


class TaskResponse(BaseModel):
    """Response sent back immediately."""
    status: str
    message: str


class EvaluationNotification(BaseModel):
    """Notification sent to evaluation server."""
    email: str
    task: str
    round: int
    nonce: str
    repo_url: str
    commit_sha: str
    pages_url: str


class RepositoryFile(BaseModel):
    """A file read back from a hosted repository."""
    path: str
    content: str
    sha: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str = "1.0.0"

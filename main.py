"""FastAPI application for receiving and processing build requests."""
import logging
import secrets
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
import uvicorn

from config import get_settings
from errors import AuthorizationError, BuildError
from models import TaskRequest, TaskResponse, HealthResponse
from services.github_service import GitHubService
from services.llm_generator import LLMGenerator
from services.notifier import NotificationService
from services.orchestrator import BuildOrchestrator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI app."""
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())
    logger.info("Starting up application...")
    logger.info(f"Generation model: {settings.openai_model}")
    logger.info(f"Default branch: {settings.default_branch}")
    yield
    logger.info("Shutting down application...")


# Create FastAPI app
app = FastAPI(
    title="Brief to Pages Builder",
    description="Receives task briefs, generates apps, and deploys to GitHub Pages",
    version="1.0.0",
    lifespan=lifespan
)


def get_orchestrator() -> BuildOrchestrator:
    """Wire the orchestrator from settings."""
    settings = get_settings()
    return BuildOrchestrator(
        generator=LLMGenerator(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            base_url=settings.openai_base_url
        ),
        publisher=GitHubService(
            token=settings.github_token,
            branch=settings.default_branch
        ),
        notifier=NotificationService(
            max_attempts=settings.notify_max_attempts,
            base_delay=settings.notify_base_delay
        ),
        propagation_delay=settings.pages_propagation_delay
    )


def authorize(secret: str) -> None:
    """Constant-time comparison against the configured secret."""
    expected = get_settings().student_secret
    if not secrets.compare_digest(secret.encode(), expected.encode()):
        raise AuthorizationError("Invalid secret")


async def require_secret(raw_request: Request) -> None:
    """Reject a bad secret before the body is validated as a TaskRequest."""
    try:
        body = await raw_request.json()
    except ValueError:
        body = None
    secret = body.get("secret") if isinstance(body, dict) else None

    try:
        authorize(secret if isinstance(secret, str) else "")
    except AuthorizationError as e:
        logger.warning("Invalid secret provided")
        raise HTTPException(
            status_code=403,
            detail=str(e)
        )


@app.get("/", response_model=HealthResponse)
async def root():
    """Root endpoint."""
    return HealthResponse(status="healthy")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy")


@app.post(
    "/api/build",
    response_model=TaskResponse,
    dependencies=[Depends(require_secret)]
)
async def build_and_deploy(
    request: TaskRequest,
    background_tasks: BackgroundTasks,
    orchestrator: BuildOrchestrator = Depends(get_orchestrator)
):
    """
    Receive task request and trigger build/deploy process.

    This endpoint:
    1. Checks the secret (require_secret) before the body is validated
    2. Returns immediate 200 response
    3. Processes task in background
    """
    logger.info(f"Received task request: {request.task} (round {int(request.round)})")

    # Runs after the response has been sent
    background_tasks.add_task(process_task, orchestrator, request)

    return TaskResponse(
        status="accepted",
        message=f"Task {request.task} received and processing started"
    )


async def process_task(orchestrator: BuildOrchestrator, request: TaskRequest) -> None:
    """Background unit of work; nothing raised here reaches the caller."""
    context = {"task": request.task, "round": int(request.round)}
    try:
        success = await orchestrator.run(request)
    except BuildError as e:
        logger.error(
            f"Round {int(request.round)} aborted for task {request.task}: {e}",
            exc_info=True,
            extra={**context, "error_type": type(e).__name__}
        )
        return
    except Exception as e:
        logger.error(
            f"Unexpected error processing task {request.task}: {e}",
            exc_info=True,
            extra={**context, "error_type": type(e).__name__}
        )
        return

    if success:
        logger.info(f"✓ Task {request.task} completed successfully!", extra=context)
    else:
        logger.error(
            f"✗ Task {request.task} completed but notification failed",
            extra={**context, "error_type": "NotificationDeliveryError"}
        )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


def main():
    """Run the application."""
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=get_settings().port,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()

"""Notification service to send results to evaluation server."""
import asyncio
import logging
from typing import Awaitable, Callable, Optional
import httpx

from errors import NotificationDeliveryError
from models import EvaluationNotification
from services.retry import retry_with_backoff

logger = logging.getLogger(__name__)


class NotificationService:
    """Handle notifications to evaluation server with retry logic."""
    
    def __init__(
        self,
        max_attempts: int = 4,
        base_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize with retry configuration."""
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.transport = transport
        self.sleep = sleep
    
    async def notify_evaluation_server(
        self,
        evaluation_url: str,
        notification: EvaluationNotification
    ) -> bool:
        """
        Send notification to evaluation server with exponential backoff.
        
        Args:
            evaluation_url: URL to POST notification to
            notification: Evaluation notification data
        
        Returns:
            True if successful, False otherwise
        """
        payload = notification.model_dump()
        attempts = 0
        
        async with httpx.AsyncClient(timeout=30.0, transport=self.transport) as client:
            
            async def deliver() -> None:
                nonlocal attempts
                attempts += 1
                logger.info(
                    f"Notifying evaluation server (attempt {attempts}/{self.max_attempts})..."
                )
                try:
                    response = await client.post(
                        evaluation_url,
                        json=payload,
                        headers={"Content-Type": "application/json"}
                    )
                except httpx.HTTPError as e:
                    raise NotificationDeliveryError(f"{type(e).__name__}: {e}") from e
                
                if not response.is_success:
                    raise NotificationDeliveryError(
                        f"Evaluation server returned {response.status_code}: "
                        f"{response.text[:200]}"
                    )
            
            try:
                await retry_with_backoff(
                    deliver,
                    max_attempts=self.max_attempts,
                    base_delay=self.base_delay,
                    retry_on=(NotificationDeliveryError,),
                    sleep=self.sleep,
                )
            except NotificationDeliveryError as e:
                logger.error(
                    f"Failed to notify evaluation server after {attempts} attempts: {e}",
                    extra={
                        "task": notification.task,
                        "round": notification.round,
                        "attempts": attempts,
                    },
                )
                return False
        
        logger.info(f"✓ Evaluation server notified successfully (attempt {attempts})")
        return True

"""Exception types raised while building and deploying a task."""


class BuildError(Exception):
    """Base class for failures in the build pipeline."""


class AuthorizationError(BuildError):
    """Request secret did not match the configured secret."""


class GenerationError(BuildError):
    """Code generation failed or returned unusable content."""


class PublishError(BuildError):
    """GitHub rejected a repository operation."""


class PublishConflictError(PublishError):
    """A sha-guarded file update hit a newer remote version."""


class NotificationDeliveryError(BuildError):
    """A single attempt to reach the evaluation server failed."""

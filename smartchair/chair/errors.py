class PostureServiceError(RuntimeError):
    """Base class for posture service failures."""


class InvalidInput(PostureServiceError):
    """Raised when a reading is malformed. Nothing is stored or published."""


class StorageUnavailable(PostureServiceError):
    """Raised when the reading store cannot persist a verdict."""

    retryable = True


class PublishFailure(PostureServiceError):
    """Raised when a verdict cannot be handed to the broadcast hub."""

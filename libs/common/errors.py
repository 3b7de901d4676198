"""Domain error taxonomy shared by every service.

Service functions raise these; ``libs.common.error_handler`` renders them as
HTTP responses so each outcome reaches the caller as a distinct status/code.
"""


class GymDeskError(Exception):
    """Base class for caller-visible domain errors."""

    status_code = 500
    code = "ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(GymDeskError):
    """A required field is missing or malformed."""

    status_code = 400
    code = "VALIDATION_ERROR"


class NotFound(GymDeskError):
    """A referenced member, trainer, plan, payment or record does not exist."""

    status_code = 404
    code = "NOT_FOUND"


class Conflict(GymDeskError):
    """A state-machine transition is not allowed from the current state."""

    status_code = 409
    code = "CONFLICT"


class UpstreamTimeout(GymDeskError):
    """An external call (AI, weather) exceeded its time budget."""

    status_code = 504
    code = "UPSTREAM_TIMEOUT"


class UpstreamError(GymDeskError):
    """An external call failed or returned something unusable."""

    status_code = 502
    code = "UPSTREAM_ERROR"

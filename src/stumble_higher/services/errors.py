"""Domain exceptions raised by the service layer.

Endpoints translate these into HTTP responses; background jobs log them.
"""

from __future__ import annotations


class StumbleError(Exception):
    """Base class for expected, user-facing service failures."""


class ConfigurationError(StumbleError):
    """Required runtime configuration is missing or malformed."""


class ResourceNotFoundError(StumbleError):
    """The referenced resource does not exist."""


class VoteValidationError(StumbleError):
    """A vote request was rejected before touching the vote table."""


class DuplicateResourceError(StumbleError):
    """A resource with the same URL has already been submitted."""


class SubmissionPaymentError(StumbleError):
    """The submission payment reference failed validation."""


class InvalidTransitionError(StumbleError):
    """A moderation action is not allowed from the resource's current status."""


class JobLockedError(StumbleError):
    """A batch job is already running elsewhere."""

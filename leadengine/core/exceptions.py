"""Custom exceptions for the lead engine."""


class LeadEngineException(Exception):
    """Base exception for the lead engine."""

    pass


class ValidationError(LeadEngineException):
    """Raised when validation fails."""

    pass


class ConfigurationError(LeadEngineException):
    """Raised when configuration is invalid."""

    pass


class NotFoundError(LeadEngineException):
    """Raised when a resource is not found."""

    pass


class TenantNotFoundError(NotFoundError):
    """Raised when a tenant does not exist or is inactive."""

    pass


class ChannelNotConnectedError(NotFoundError):
    """Raised when no tenant owns the given channel account."""

    pass


class IdentityError(LeadEngineException):
    """Raised when a contact identity cannot be resolved or merged.

    ``reason`` carries a stable code callers can branch on.
    """

    reason = "IdentityError"

    def __init__(self, message: str, reason: str | None = None) -> None:
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class InsufficientHintsError(IdentityError):
    """Neither email nor phone was supplied."""

    reason = "InsufficientHints"


class ContactNotFoundError(IdentityError):
    """Contact is missing inside the caller's tenant."""

    reason = "NotFound"


class AlreadyMergedError(IdentityError):
    """Contact was already merged into another record."""

    reason = "AlreadyMerged"


class ProviderError(LeadEngineException):
    """Raised when the AI provider call fails."""

    pass


class ProviderTimeoutError(ProviderError):
    """Raised when the AI provider does not answer in time."""

    pass


class ProviderResponseError(ProviderError):
    """Raised when the AI provider returns an unusable payload."""

    pass


class ClassificationDegraded(LeadEngineException):
    """AI-assisted hot-lead scoring failed; keyword-only result applies."""

    pass


class GenerationDegraded(LeadEngineException):
    """AI reply generation failed; canned fallback text applies."""

    pass


class ScoringInconsistency(LeadEngineException):
    """Denormalized contact counters disagree with the event ledger."""

    def __init__(self, message: str, expected: dict[str, int], actual: dict[str, int]) -> None:
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class TenantIsolationViolation(LeadEngineException):
    """A row outside the caller's tenant was about to be read or written."""

    pass

"""
Domain-specific exception hierarchy for the slot availability engine.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""

    code = "availability_error"


class RequestValidationError(AvailabilityError):
    """Raised when a caller sends a malformed or out-of-policy request."""

    code = "invalid_request"


class MissingRequiredField(RequestValidationError):
    """Raised when provider_id or date is absent."""

    code = "missing_required_field"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"{field_name} is required")


class InvalidProviderId(RequestValidationError):
    """Raised when provider_id is not a canonical UUID."""

    code = "invalid_provider_id"


class InvalidListingId(RequestValidationError):
    """Raised when a supplied listing_id is not a canonical UUID."""

    code = "invalid_listing_id"


class InvalidDate(RequestValidationError):
    """Raised when the requested date cannot be parsed."""

    code = "invalid_date"


class DateOutOfRange(RequestValidationError):
    """Raised when the requested date lies outside the bookable window."""

    code = "date_out_of_range"


class UpstreamFailure(AvailabilityError):
    """Raised when the storage collaborator could not deliver schedule data."""

    code = "upstream_failure"


class StorageError(Exception):
    """Raised by storage adapters when bookings or listings cannot be loaded."""

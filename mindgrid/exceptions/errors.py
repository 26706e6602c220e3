"""Error taxonomy for the MindGrid API.

Every expected failure carries the HTTP status it maps to and a human-readable
message. The exception handler in ``mindgrid.exceptions.handlers`` renders them
as ``{"error": message}`` bodies.
"""

from typing import Optional


class MindGridError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class AuthenticationError(MindGridError):
    """No valid session for the request."""

    status_code = 401
    default_message = "Unauthorized"


class UserInputError(MindGridError):
    """Missing or invalid request field."""

    status_code = 400
    default_message = "Invalid request"


class MissingApiKeyError(UserInputError):
    """The caller has not stored a provider API key."""

    default_message = (
        "OpenAI API key not configured. Please add your API key in settings."
    )


class ConfigurationError(MindGridError):
    """A backing table, column or constraint is missing from the database."""

    status_code = 500
    default_message = "Database not configured."


class SettingsTableMissingError(ConfigurationError):
    default_message = (
        "Database not configured. Please run the user_settings migration in Supabase."
    )


class NotFoundError(MindGridError):
    status_code = 404
    default_message = "Not found"


class UpstreamProviderError(MindGridError):
    """Non-success answer from the external generation API.

    ``status_code`` is the provider's status when it sent one.
    """

    status_code = 500


class ContractViolationError(MindGridError):
    """Provider answered, but the payload does not have the expected shape."""

    status_code = 500


class StorageError(MindGridError):
    """Object storage rejected an upload."""

    status_code = 500
    default_message = "Failed to upload file"

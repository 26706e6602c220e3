"""
Exceptions package for the MindGrid backend.

Error classes shared by routes and data access, plus the FastAPI exception
handlers that turn them into JSON responses.
"""

from .errors import (
    AuthenticationError,
    ConfigurationError,
    ContractViolationError,
    MindGridError,
    MissingApiKeyError,
    NotFoundError,
    SettingsTableMissingError,
    StorageError,
    UpstreamProviderError,
    UserInputError,
)
from .handlers import (
    general_exception_handler,
    http_exception_handler,
    mindgrid_error_handler,
    validation_exception_handler,
    value_error_handler,
)

__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "ContractViolationError",
    "MindGridError",
    "MissingApiKeyError",
    "NotFoundError",
    "SettingsTableMissingError",
    "StorageError",
    "UpstreamProviderError",
    "UserInputError",
    "general_exception_handler",
    "http_exception_handler",
    "mindgrid_error_handler",
    "validation_exception_handler",
    "value_error_handler",
]

from .base import (
    AppError,
    DomainError,
    DuplicateFieldError,
    MalformedIdentifierError,
    PrincipalRequiredError,
    ResourceNotFoundError,
    ValidationError,
)
from .http import classify_error, register_error_handler

__all__ = [
    "AppError",
    "DomainError",
    "DuplicateFieldError",
    "MalformedIdentifierError",
    "PrincipalRequiredError",
    "ResourceNotFoundError",
    "ValidationError",
    "classify_error",
    "register_error_handler",
]

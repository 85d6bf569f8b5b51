"""
Error middleware for Route Validator.
"""

from .error_handler import ValidationErrorHandler, setup_validation_error_handling

__all__ = ["ValidationErrorHandler", "setup_validation_error_handling"]

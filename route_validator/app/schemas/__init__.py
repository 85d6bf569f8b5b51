"""
Schemas used by the example application.
"""

from .key import KeyParams, KeySchema

__all__ = ["KeyParams", "KeySchema"]

"""
Utilities for Route Validator.
"""

"""
Middleware for Route Validator.
"""

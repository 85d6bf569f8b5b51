"""
Core configuration, container table and exceptions for Route Validator.
"""

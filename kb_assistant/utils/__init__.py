"""
Shared utilities: logging, errors, validation, background tasks
"""

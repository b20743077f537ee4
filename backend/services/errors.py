"""
Service-level errors. The API maps each to an HTTP status.
"""


class AuthError(ValueError):
    """Missing, unknown or rejected credentials."""


class NotFoundError(ValueError):
    """Unknown session or player id."""

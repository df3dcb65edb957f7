"""
models/errors.py
----------------
Domain exceptions shared across services.
"""


class FinanceBotError(Exception):
    """Base class for all bot-specific errors."""


class ValidationError(FinanceBotError):
    """Raised when user-supplied values are out of range or malformed."""


class NotFoundError(FinanceBotError):
    """Raised when a referenced record does not exist or belongs to another user."""


class MessageDeliveryError(FinanceBotError):
    """Raised when a messaging provider reports a failed delivery."""

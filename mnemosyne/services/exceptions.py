"""
Service-level exceptions.

This module contains exceptions that can be raised by the cycle model
and the storage layer. Empty entry collections and a missing cycle
configuration are regular states, not errors.
"""

class MnemosyneError(Exception):
    """Base exception for mood and cycle tracking errors."""
    pass

class InvalidConfigurationError(MnemosyneError, ValueError):
    """Raised when a cycle configuration violates its day ordering rules."""
    pass

class RepositoryError(MnemosyneError):
    """Raised when a stored record cannot be read back into a model."""
    pass

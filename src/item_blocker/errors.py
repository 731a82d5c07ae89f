"""Exception types raised by item-blocker."""
from __future__ import annotations


class ItemBlockerError(Exception):
    """Base class for item-blocker errors."""


class CollaboratorError(ItemBlockerError):
    """Raised when an optional external collaborator fails.

    Attributes
    ----------
    collaborator:
        Name of the failing collaborator, used in diagnostics.
    """

    def __init__(self, collaborator: str, message: str) -> None:
        self.collaborator = collaborator
        self.message = message
        super().__init__(f"{collaborator} call failed: {message}")


class AuditLogUnavailable(ItemBlockerError):
    """Raised when there is no readable audit log to tail."""


class ConfigNotWritable(ItemBlockerError):
    """Raised when saving would overwrite a configuration that failed to load."""

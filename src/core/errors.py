"""
Error taxonomy for search and bundle assembly.

Client-input and assembly failures propagate to the API layer, which maps
them to status codes. Collaborator failures never leave the assistant
module: they are logged and replaced by deterministic fallback text.
"""

from typing import Any, Dict, Optional


class ShoppingEngineError(Exception):
    """Base class for errors raised by the search and bundle pipeline."""

    def __init__(self, message: str, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.diagnostics: Dict[str, Any] = diagnostics or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "diagnostics": self.diagnostics,
        }


class InputError(ShoppingEngineError, ValueError):
    """Missing or malformed request input (empty query, missing ids)."""
    pass


class NotFoundError(ShoppingEngineError, LookupError):
    """A referenced product id does not exist in the catalog."""
    pass


class InsufficientCandidatesError(ShoppingEngineError):
    """Fewer products than a bundle needs survived filtering."""
    pass


class TemplateResolutionError(ShoppingEngineError):
    """Neither a role template nor the generic classifier could fill a tier."""
    pass


class CollaboratorError(Exception):
    """The assistant returned nothing usable. Always recovered locally."""
    pass

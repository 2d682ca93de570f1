"""Error taxonomy for ability execution.

Every failure an ability can report is an ``AbilityError`` subclass. Handlers
raise them internally and convert them to ``{"success": False, ...}``
envelopes at the boundary; none of them escape to a caller.
"""

from __future__ import annotations

from typing import Any


class AbilityError(Exception):
    """Base class for failures reported through a failure envelope.

    Attributes:
        message: Human-readable message placed in the envelope.
        details: Extra envelope fields (e.g. ``id``, ``title``).
    """

    kind = "error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_envelope(self) -> dict[str, Any]:
        envelope: dict[str, Any] = {"success": False}
        envelope.update(self.details)
        envelope["message"] = self.message
        return envelope


class ValidationError(AbilityError):
    """Missing or malformed input. Raised before any store access."""

    kind = "validation"


class NotFoundError(AbilityError):
    """Referenced post, element or ability does not exist."""

    kind = "not_found"


class EncodingError(AbilityError):
    """Structured data could not be serialized or parsed."""

    kind = "encoding"


class PatternCompileError(AbilityError):
    """A find pattern (or its replacement template) is invalid."""

    kind = "pattern"


class PostConditionError(AbilityError):
    """A patched document no longer parses; the result was discarded."""

    kind = "post_condition"


class PermissionDeniedError(AbilityError):
    """The acting context lacks the capability an ability requires."""

    kind = "permission"


class StoreError(AbilityError):
    """The document store failed to read or write."""

    kind = "store"

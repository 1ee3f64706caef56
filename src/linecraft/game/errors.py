from __future__ import annotations


class LineCraftError(Exception):
    """Base class for engine contract violations."""


class InvalidShapeError(LineCraftError, ValueError):
    """Shape matrix or special-block annotation is malformed."""


class InvalidCellError(LineCraftError, ValueError):
    """A cell carries a life counter it may not have, or lacks one it needs."""


class IllegalPlacementError(LineCraftError, ValueError):
    """A placement was executed without passing `can_place` first."""


class SessionStateError(LineCraftError, RuntimeError):
    """The session is not in a state that accepts the requested action."""

"""Error taxonomy for pathfinding runs.

Every error is terminal for a single run. Each carries a diagnostics dict
that callers surface verbatim (goal, obstacle dump, failing frame, ...).
"""

from typing import Any, Dict, Optional


class PathfinderError(Exception):
    """Base class for all run failures."""

    cause: str = "error"

    def __init__(self, message: str, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.diagnostics: Dict[str, Any] = diagnostics or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"cause": self.cause, "message": str(self)}


class SourceUnavailable(PathfinderError):
    """The obstacle source could not produce any data."""

    cause = "source_unavailable"

    def __init__(self, reason: str, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(f"Obstacle source unavailable: {reason}", diagnostics)
        self.reason = reason


class MalformedSource(PathfinderError):
    """A structured record was present but invalid."""

    cause = "malformed_source"

    def __init__(self, line_number: int, line: str, reason: str):
        super().__init__(
            f"Malformed record at line {line_number} ({reason}): {line!r}",
            {"parse_error_line": line_number, "line": line, "reason": reason},
        )
        self.line_number = line_number
        self.line = line
        self.reason = reason


class Unsolvable(PathfinderError):
    """No delay within the bound gave a safe lookahead."""

    cause = "unsolvable"

    def __init__(self, frame: int, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(f"No safe jump found at frame {frame}", diagnostics)
        self.frame = frame


class FrameCapExceeded(PathfinderError):
    """The frame safety cap was hit before reaching the goal."""

    cause = "max_frames_exceeded"

    def __init__(self, max_frames: int, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(f"Goal not reached within {max_frames} frames", diagnostics)
        self.max_frames = max_frames


class Cancelled(PathfinderError):
    """The caller's stop flag fired between frames."""

    cause = "cancelled"

    def __init__(self, frame: int, diagnostics: Optional[Dict[str, Any]] = None):
        super().__init__(f"Run cancelled at frame {frame}", diagnostics)
        self.frame = frame

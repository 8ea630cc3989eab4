"""Line-oriented obstacle record format.

    # comment
    PLATFORM,x,y,w,h
    SPIKE,x,y,w,h
    JUMP_PAD,x,y,w[,power]

Keywords are case-insensitive and fields are trimmed. A record with too few
fields, or a field that is not a number, fails the whole parse. Unknown
keywords are skipped so newer files still load.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .config import CourseConfig
from .errors import MalformedSource, SourceUnavailable
from .obstacles import Obstacle, ObstacleKind

logger = logging.getLogger(__name__)

# Minimum field count per keyword, keyword included
_MIN_FIELDS = {
    "PLATFORM": 5,
    "SPIKE": 5,
    "JUMP_PAD": 4,
}

_KEYWORDS = {
    ObstacleKind.PLATFORM: "PLATFORM",
    ObstacleKind.SPIKE: "SPIKE",
    ObstacleKind.JUMP_PAD: "JUMP_PAD",
}


def _number(token: str, line_number: int, line: str) -> float:
    try:
        return float(token)
    except ValueError as exc:
        raise MalformedSource(line_number, line, f"not a number: {token!r}") from exc


def parse_record(line: str, line_number: int = 1,
                 course_config: Optional[CourseConfig] = None) -> Optional[Obstacle]:
    """Parse one line. Returns None for blanks, comments and unknown keywords."""
    course_config = course_config or CourseConfig()
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    tokens = [t.strip() for t in stripped.split(",")]
    keyword = tokens[0].upper()
    if keyword not in _MIN_FIELDS:
        logger.debug("Ignoring unknown record at line %d: %s", line_number, stripped)
        return None

    needed = _MIN_FIELDS[keyword]
    if len(tokens) < needed:
        raise MalformedSource(
            line_number, stripped, f"{keyword} needs {needed - 1} fields, got {len(tokens) - 1}"
        )

    values = [_number(t, line_number, stripped) for t in tokens[1:needed]]
    if keyword == "PLATFORM":
        return Obstacle.platform(*values)
    if keyword == "SPIKE":
        return Obstacle.spike(*values)

    x, y, w = values
    power = _number(tokens[4], line_number, stripped) if len(tokens) >= 5 else 0.0
    return Obstacle.jump_pad(x, y, w, h=course_config.jump_pad_height, power=power)


def parse_level(lines: Union[str, Iterable[str]],
                course_config: Optional[CourseConfig] = None) -> List[Obstacle]:
    """Parse a whole level. Accepts the text itself or an iterable of lines.

    Raises:
        MalformedSource: on the first invalid record.
    """
    if isinstance(lines, str):
        lines = lines.splitlines()

    obstacles = []
    for line_number, line in enumerate(lines, start=1):
        obstacle = parse_record(line, line_number, course_config)
        if obstacle is not None:
            obstacles.append(obstacle)
    return obstacles


def read_level(path: Union[str, Path], course_config: Optional[CourseConfig] = None) -> List[Obstacle]:
    """Parse a level file.

    Level files are UTF-8.

    Raises:
        SourceUnavailable: if the file cannot be opened.
        MalformedSource: on bytes that are not UTF-8, or the first invalid record.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise SourceUnavailable("file_not_found", {"source": str(path)}) from exc
    except OSError as exc:
        raise SourceUnavailable(f"unreadable: {exc}", {"source": str(path)}) from exc

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        line_number = data.count(b"\n", 0, exc.start) + 1
        line = data.splitlines()[line_number - 1].decode("utf-8", errors="replace")
        raise MalformedSource(line_number, line, "invalid utf-8") from exc
    return parse_level(text, course_config)


def _fmt(value: float) -> str:
    # repr round-trips floats exactly; trim the ".0" of whole numbers
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def format_record(obstacle: Obstacle, course_config: Optional[CourseConfig] = None) -> str:
    """Format one obstacle as a record line.

    Lossy for pads: the record has no height field, so a pad reads back at
    `course_config.jump_pad_height`, and a non-positive power is not written.
    A warning is logged for pads whose height differs.
    """
    keyword = _KEYWORDS[obstacle.kind]
    if obstacle.kind == ObstacleKind.JUMP_PAD:
        pad_height = (course_config or CourseConfig()).jump_pad_height
        if obstacle.h != pad_height:
            logger.warning("Jump pad at x=%s has height %s; written records imply %s",
                           obstacle.x, obstacle.h, pad_height)
        fields = [obstacle.x, obstacle.y, obstacle.w]
        if obstacle.power > 0:
            fields.append(obstacle.power)
    else:
        fields = [obstacle.x, obstacle.y, obstacle.w, obstacle.h]
    return ",".join([keyword] + [_fmt(v) for v in fields])


def format_level(obstacles: Iterable[Obstacle], header: Optional[str] = None,
                 course_config: Optional[CourseConfig] = None) -> str:
    """Format obstacles as level text, one record per line."""
    lines = []
    if header:
        lines.extend(f"# {h}" for h in header.splitlines())
    lines.extend(format_record(o, course_config) for o in obstacles)
    return "\n".join(lines) + "\n"


def write_level(path: Union[str, Path], obstacles: Iterable[Obstacle],
                header: Optional[str] = None,
                course_config: Optional[CourseConfig] = None) -> Path:
    """Write obstacles to a UTF-8 level file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_level(obstacles, header, course_config), encoding="utf-8")
    return path

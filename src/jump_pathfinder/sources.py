"""Obstacle sources: where a run gets its course from.

A source yields a finite ordered list of obstacles or fails with a reason.
ChainedSource tries discovery strategies in rank order and stops at the
first one that produces data:

    source = ChainedSource([
        CallableSource("live", read_live_objects),
        LevelFileSource(save_dir / "level.txt"),
    ])
    obstacles = source.load()
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Union

from .config import CourseConfig
from .errors import MalformedSource, SourceUnavailable
from .level_format import read_level
from .obstacles import Obstacle

logger = logging.getLogger(__name__)


class ObstacleSource:
    """Base class for obstacle sources."""

    name: str = "source"

    def load(self) -> List[Obstacle]:
        """Return the obstacle list.

        Raises:
            SourceUnavailable: no data could be produced.
            MalformedSource: data was present but invalid.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class StaticSource(ObstacleSource):
    """In-memory obstacle list. An empty list is a valid (empty) course."""

    name = "static"

    def __init__(self, obstacles: Iterable[Obstacle]):
        self.obstacles = list(obstacles)

    def load(self) -> List[Obstacle]:
        return list(self.obstacles)


class LevelFileSource(ObstacleSource):
    """Level file in the structured record format."""

    def __init__(self, path: Union[str, Path], course_config: Optional[CourseConfig] = None):
        self.path = Path(path)
        self.course_config = course_config
        self.name = str(self.path)

    def load(self) -> List[Obstacle]:
        return read_level(self.path, self.course_config)


class ReportSource(ObstacleSource):
    """Obstacle dump of a previously written run report."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = str(self.path)

    def load(self) -> List[Obstacle]:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except FileNotFoundError as exc:
            raise SourceUnavailable("file_not_found", {"source": self.name}) from exc
        except json.JSONDecodeError as exc:
            raise MalformedSource(exc.lineno, self.name, exc.msg) from exc

        if "objects" not in data:
            raise SourceUnavailable("report has no objects", {"source": self.name})

        obstacles = []
        for i, record in enumerate(data["objects"], start=1):
            try:
                obstacles.append(Obstacle.from_dict(record))
            except (KeyError, ValueError, TypeError) as exc:
                raise MalformedSource(i, json.dumps(record), f"bad object record: {exc}") from exc
        return obstacles


class CallableSource(ObstacleSource):
    """Wraps a discovery function.

    The function returns a list of obstacles; None or an empty list means it
    found nothing. It may also raise SourceUnavailable with its own reason.
    """

    def __init__(self, name: str, fn: Callable[[], Optional[Sequence[Obstacle]]]):
        self.name = name
        self.fn = fn

    def load(self) -> List[Obstacle]:
        result = self.fn()
        if not result:
            raise SourceUnavailable("no_objects", {"source": self.name})
        return list(result)


class ChainedSource(ObstacleSource):
    """Ranked discovery strategies, short-circuiting on the first success.

    An unavailable strategy is recorded and the next one is tried. A malformed
    source is fatal at once: the data was found, it is just wrong.
    """

    name = "chain"

    def __init__(self, sources: Sequence[ObstacleSource]):
        self.sources = list(sources)
        self.attempts: List[Dict[str, Any]] = []
        self.selected: Optional[ObstacleSource] = None

    def load(self) -> List[Obstacle]:
        self.attempts = []
        self.selected = None
        for source in self.sources:
            try:
                obstacles = source.load()
            except SourceUnavailable as exc:
                logger.info("Source %s unavailable: %s", source.name, exc.reason)
                self.attempts.append({"source": source.name, "ok": False, "reason": exc.reason,
                                      **exc.diagnostics})
                continue
            self.attempts.append({"source": source.name, "ok": True, "objects": len(obstacles)})
            self.selected = source
            logger.info("Loaded %d obstacles from %s", len(obstacles), source.name)
            return obstacles

        raise SourceUnavailable("all sources failed", {"attempts": list(self.attempts)})

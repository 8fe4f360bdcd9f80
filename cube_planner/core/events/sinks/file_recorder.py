"""
JSON lines recorder for planning events.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import IO, TYPE_CHECKING

if TYPE_CHECKING:
    from cube_planner.core.events.events import PlanningEvent


class FileRecorderSink:
    """
    Appends one JSON object per event to ``path``.

    The file is opened on the first event, so a compilation that emits
    nothing leaves no file behind.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._fh: IO[str] | None = None
        self._closed = False

    @property
    def path(self) -> Path:
        return self._path

    def on_event(self, event: PlanningEvent) -> None:
        if self._closed:
            raise RuntimeError(f"Recorder for {self._path} is closed")

        if self._fh is None:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self._path.open("a", encoding="utf-8")

        self._fh.write(json.dumps(event.to_record(), sort_keys=True) + "\n")
        self._fh.flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        if self._fh is not None:
            self._fh.close()
            self._fh = None

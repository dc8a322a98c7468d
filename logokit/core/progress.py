"""Progress reporters for batch installs.

The installer only talks to the ``ProgressReporter`` protocol; the rich
bar is what the CLI uses, ``RecordingReporter`` keeps events in memory.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Protocol

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)


class ProgressReporter(Protocol):
    def start(self, total: int) -> None: ...

    def job_started(self, name: str) -> None: ...

    def job_finished(self, name: str, ok: bool, completed: int, total: int) -> None: ...

    def stop(self) -> None: ...


class RichProgressReporter:
    """Single progress bar showing the logo currently being installed."""

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            TextColumn("Installing logos"),
            BarColumn(),
            TaskProgressColumn(),
            MofNCompleteColumn(),
            TimeRemainingColumn(),
            TextColumn("{task.fields[current]}"),
            console=console,
            transient=False,
        )
        self._task: TaskID | None = None

    def start(self, total: int) -> None:
        self._task = self._progress.add_task("install", total=total, current="Starting...")
        self._progress.start()

    def job_started(self, name: str) -> None:
        if self._task is not None:
            self._progress.update(self._task, current=name)

    def job_finished(self, name: str, ok: bool, completed: int, total: int) -> None:
        if self._task is not None:
            mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
            self._progress.update(self._task, completed=completed, current=f"{mark} {name}")

    def stop(self) -> None:
        self._progress.stop()
        self._task = None


@dataclass
class ProgressEvent:
    kind: str  # "start", "started", "finished", "stop"
    name: str = ""
    ok: bool | None = None
    completed: int = 0
    total: int = 0
    at: float = field(default_factory=time.monotonic)


class RecordingReporter:
    """Keeps every event; also tracks how many jobs were in flight at once."""

    def __init__(self) -> None:
        self.events: list[ProgressEvent] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def start(self, total: int) -> None:
        self.events.append(ProgressEvent("start", total=total))

    def job_started(self, name: str) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.events.append(ProgressEvent("started", name=name))

    def job_finished(self, name: str, ok: bool, completed: int, total: int) -> None:
        self.in_flight -= 1
        self.events.append(ProgressEvent("finished", name, ok, completed, total))

    def stop(self) -> None:
        self.events.append(ProgressEvent("stop"))

    def of_kind(self, kind: str) -> list[ProgressEvent]:
        return [e for e in self.events if e.kind == kind]

"""Batch logo installer: resolves names, runs install jobs with bounded
concurrency, and aggregates per-job outcomes.

Jobs run on the asyncio event loop.  The blocking parts of a job (the
catalog fetch and the file write) are pushed to worker threads with
``asyncio.to_thread`` so at most ``concurrency`` jobs are in flight.

Two scheduling strategies are available:

* ``"pool"`` (default): ``concurrency`` workers pull the next job from a
  queue as soon as they finish one.
* ``"window"``: jobs run in consecutive windows of ``concurrency``; a
  window must fully settle before the next one starts.

Either way a failing job never cancels its siblings, and outcomes come
back in input order.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Protocol, Sequence

from logokit.core import transform
from logokit.core.catalog import Logo, Resolution
from logokit.core.config import ProjectConfig
from logokit.core.errors import (
    CatalogError,
    DestinationExistsError,
    InstallAggregateError,
    ResolutionError,
    TransformError,
)
from logokit.core.logger import get_logger
from logokit.core.progress import ProgressReporter

_log = get_logger("installer")

DEFAULT_CONCURRENCY = 5
DEFAULT_JOB_TIMEOUT = 30.0  # seconds
STRATEGIES = ("pool", "window")


class Catalog(Protocol):
    def resolve(self, names: Sequence[str], store: bool = True) -> Resolution: ...

    def fetch_svg(self, route: str) -> str: ...


Renderer = Callable[[str, str, Logo, ProjectConfig], str]


class FailureKind(Enum):
    NOT_FOUND = "not_found"
    EXISTS = "exists"
    PERMISSION = "permission"
    NETWORK = "network"
    TRANSFORM = "transform"
    TIMEOUT = "timeout"
    GENERIC = "generic"


@dataclass(frozen=True)
class InstallJob:
    """One logo to install.  ``outputs`` pairs each output kind with its destination.

    A job whose destinations could not be derived carries the reason in
    ``error`` and fails when it runs, like any other per-job fault.
    """
    name: str
    logo: Logo
    target_dir: Path
    outputs: tuple[tuple[str, Path], ...]
    overwrite: bool = False
    error: str = ""

    @property
    def destinations(self) -> list[Path]:
        return [dest for _, dest in self.outputs]


@dataclass(frozen=True)
class JobOutcome:
    name: str
    ok: bool
    paths: tuple[Path, ...] = ()
    reason: str = ""
    kind: FailureKind | None = None

    @classmethod
    def succeeded(cls, job: InstallJob, paths: Sequence[Path]) -> "JobOutcome":
        return cls(job.name, True, tuple(paths))

    @classmethod
    def failed(cls, job: InstallJob, reason: str, kind: FailureKind) -> "JobOutcome":
        return cls(job.name, False, reason=reason, kind=kind)


@dataclass
class InstallReport:
    jobs: list[InstallJob]
    outcomes: list[JobOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def succeeded(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[JobOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def raise_for_failures(self) -> None:
        if self.failed:
            raise InstallAggregateError(self.outcomes)


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an exception raised inside a job to its failure kind."""
    if isinstance(exc, DestinationExistsError):
        return FailureKind.EXISTS
    if isinstance(exc, PermissionError):
        return FailureKind.PERMISSION
    if isinstance(exc, CatalogError):
        return FailureKind.NOT_FOUND if exc.status_code == 404 else FailureKind.NETWORK
    if isinstance(exc, TransformError):
        return FailureKind.TRANSFORM
    if isinstance(exc, asyncio.TimeoutError):
        return FailureKind.TIMEOUT
    return FailureKind.GENERIC


def write_output(dest: Path, content: str, overwrite: bool) -> None:
    """Write one output file.

    Without ``overwrite`` the file is opened in exclusive-create mode, so the
    existence check and the write happen in the same system call.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    mode = "w" if overwrite else "x"
    try:
        with open(dest, mode, encoding="utf-8") as f:
            f.write(content)
    except FileExistsError as e:
        raise DestinationExistsError(dest.name) from e


class _RunState:
    def __init__(self, total: int, reporter: ProgressReporter | None) -> None:
        self.total = total
        self.completed = 0
        self.reporter = reporter

    def notify(self, event: str, *args: object) -> None:
        """Forward a progress event; a failing reporter never affects the jobs."""
        if self.reporter is None:
            return
        try:
            getattr(self.reporter, event)(*args)
        except Exception:
            _log.exception("Installer: progress reporter failed on %s", event)


class BatchInstaller:
    """Installs logos from a catalog into the configured output directory."""

    def __init__(
        self,
        catalog: Catalog,
        config: ProjectConfig,
        output_dir: Path,
        reporter: ProgressReporter | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
        job_timeout: float | None = DEFAULT_JOB_TIMEOUT,
        strategy: str = "pool",
        render: Renderer = transform.render,
        theme: str = "light",
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if strategy not in STRATEGIES:
            raise ValueError(f"unknown strategy {strategy!r}")
        self.catalog = catalog
        self.config = config
        self.output_dir = Path(output_dir)
        self.reporter = reporter
        self.concurrency = concurrency
        self.job_timeout = job_timeout
        self.strategy = strategy
        self.render = render
        self.theme = theme

    # ── Planning ──

    def make_job(self, name: str, logo: Logo, overwrite: bool) -> InstallJob:
        outputs = tuple(
            (kind, self.output_dir / transform.output_file_name(logo, kind, self.config))
            for kind in transform.output_kinds(self.config)
        )
        return InstallJob(name, logo, self.output_dir, outputs, overwrite)

    async def plan(
        self, names: Sequence[str], force: bool = False, dry_run: bool = False,
    ) -> list[InstallJob]:
        """Resolve ``names`` into jobs; any unknown name aborts with ResolutionError."""
        requested = [self.config.aliases.get(n, n) for n in names]
        resolution = await asyncio.to_thread(self.catalog.resolve, requested, not dry_run)
        if resolution.not_found:
            _log.warning("Installer: unresolved names %s", resolution.not_found)
            raise ResolutionError(resolution.not_found, resolution.suggestions)
        jobs: list[InstallJob] = []
        for name, logo in zip(names, resolution.found):
            try:
                jobs.append(self.make_job(name, logo, force))
            except TransformError as e:
                _log.warning("Installer: cannot plan %s: %s", name, e)
                jobs.append(InstallJob(name, logo, self.output_dir, (), force, error=str(e)))
        return jobs

    # ── Execution ──

    async def run(
        self,
        names: Sequence[str],
        force: bool = False,
        dry_run: bool = False,
        progress: bool = True,
    ) -> InstallReport:
        """Resolve and install ``names``; per-job failures are in the report."""
        jobs = await self.plan(names, force=force, dry_run=dry_run)
        if dry_run:
            _log.info("Installer: dry run, %d jobs planned", len(jobs))
            return InstallReport(jobs, dry_run=True)
        outcomes = await self.run_jobs(jobs, progress=progress)
        return InstallReport(jobs, outcomes)

    async def install(
        self,
        names: Sequence[str],
        force: bool = False,
        dry_run: bool = False,
        progress: bool = True,
    ) -> InstallReport:
        """Like ``run`` but raises InstallAggregateError when any job failed."""
        report = await self.run(names, force=force, dry_run=dry_run, progress=progress)
        report.raise_for_failures()
        return report

    async def run_jobs(self, jobs: Sequence[InstallJob], progress: bool = True) -> list[JobOutcome]:
        reporter = self.reporter if progress else None
        state = _RunState(len(jobs), reporter)
        state.notify("start", len(jobs))
        try:
            if self.strategy == "window":
                outcomes = await self._run_windows(jobs, state)
            else:
                outcomes = await self._run_pool(jobs, state)
        finally:
            state.notify("stop")
        failed = sum(1 for o in outcomes if not o.ok)
        _log.info("Installer: %d succeeded, %d failed", len(outcomes) - failed, failed)
        return outcomes

    async def _run_pool(self, jobs: Sequence[InstallJob], state: _RunState) -> list[JobOutcome]:
        outcomes: list[JobOutcome | None] = [None] * len(jobs)
        queue: asyncio.Queue[int] = asyncio.Queue()
        for index in range(len(jobs)):
            queue.put_nowait(index)

        async def worker() -> None:
            while True:
                try:
                    index = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                outcomes[index] = await self._run_job(jobs[index], state)

        workers = min(self.concurrency, len(jobs))
        await asyncio.gather(*(worker() for _ in range(workers)))
        return [o for o in outcomes if o is not None]

    async def _run_windows(self, jobs: Sequence[InstallJob], state: _RunState) -> list[JobOutcome]:
        outcomes: list[JobOutcome] = []
        for start in range(0, len(jobs), self.concurrency):
            window = jobs[start:start + self.concurrency]
            outcomes.extend(await asyncio.gather(*(self._run_job(j, state) for j in window)))
        return outcomes

    async def _run_job(self, job: InstallJob, state: _RunState) -> JobOutcome:
        state.notify("job_started", job.name)
        try:
            if self.job_timeout is None:
                paths = await self._execute(job)
            else:
                paths = await asyncio.wait_for(self._execute(job), self.job_timeout)
            outcome = JobOutcome.succeeded(job, paths)
            _log.debug("Installer: installed %s", job.name)
        except asyncio.TimeoutError:
            outcome = JobOutcome.failed(
                job, f"Timed out after {self.job_timeout}s", FailureKind.TIMEOUT
            )
            _log.warning("Installer: %s timed out", job.name)
        except Exception as e:
            kind = classify_failure(e)
            outcome = JobOutcome.failed(job, str(e) or type(e).__name__, kind)
            if kind is FailureKind.GENERIC:
                _log.exception("Installer: %s failed", job.name)
            else:
                _log.warning("Installer: %s failed (%s): %s", job.name, kind.value, e)
        state.completed += 1
        state.notify("job_finished", job.name, outcome.ok, state.completed, state.total)
        return outcome

    async def _execute(self, job: InstallJob) -> list[Path]:
        if job.error:
            raise TransformError(job.error)
        raw = await asyncio.to_thread(self.catalog.fetch_svg, job.logo.route_for(self.theme))
        rendered = [
            (dest, self.render(raw, kind, job.logo, self.config)) for kind, dest in job.outputs
        ]
        written: list[Path] = []
        for dest, content in rendered:
            await asyncio.to_thread(write_output, dest, content, job.overwrite)
            written.append(dest)
        return written


def install_logos(
    installer: BatchInstaller,
    names: Sequence[str],
    force: bool = False,
    dry_run: bool = False,
    progress: bool = True,
) -> InstallReport:
    """Synchronous entry point: run a full install on a fresh event loop."""
    return asyncio.run(installer.run(names, force=force, dry_run=dry_run, progress=progress))

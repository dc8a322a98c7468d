"""Exception types and exit codes shared across logokit."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from logokit.core.installer import JobOutcome


class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIG_ERROR = 2
    NETWORK_ERROR = 3
    NOT_FOUND = 4
    PERMISSION_ERROR = 5


class LogokitError(Exception):
    """Base class for all errors raised by logokit."""

    exit_code = ExitCode.GENERAL_ERROR


class ConfigurationError(LogokitError):
    exit_code = ExitCode.CONFIG_ERROR

    def __init__(self, message: str, config_path: str | None = None) -> None:
        super().__init__(message)
        self.config_path = config_path


class CatalogError(LogokitError):
    """A request to the remote catalog failed (connection, timeout or HTTP status)."""

    exit_code = ExitCode.NETWORK_ERROR

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class TransformError(LogokitError):
    """Raw SVG content could not be turned into the requested output."""


class DestinationExistsError(LogokitError):
    exit_code = ExitCode.PERMISSION_ERROR

    def __init__(self, path: str) -> None:
        super().__init__(f"File {path} already exists. Use --force to overwrite.")
        self.path = path


class ResolutionError(LogokitError):
    """Some requested names are not in the catalog; nothing was installed."""

    exit_code = ExitCode.NOT_FOUND

    def __init__(self, not_found: Sequence[str], suggestions: dict[str, list[str]] | None = None) -> None:
        super().__init__(f"Logos not found: {', '.join(not_found)}")
        self.not_found = list(not_found)
        self.suggestions = suggestions or {}


class InstallAggregateError(LogokitError):
    """Raised after every job settled when at least one of them failed."""

    def __init__(self, outcomes: Sequence["JobOutcome"]) -> None:
        self.outcomes = list(outcomes)
        failed = self.failed
        lines = [f"{o.name}: {o.reason}" for o in failed]
        super().__init__(
            f"{len(failed)} of {len(self.outcomes)} installs failed:\n" + "\n".join(lines)
        )

    @property
    def failed(self) -> list["JobOutcome"]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def succeeded(self) -> list["JobOutcome"]:
        return [o for o in self.outcomes if o.ok]

    @property
    def exit_code(self) -> ExitCode:  # type: ignore[override]
        from logokit.core.installer import FailureKind

        kinds = {o.kind for o in self.failed}
        if kinds and kinds <= {FailureKind.PERMISSION, FailureKind.EXISTS}:
            return ExitCode.PERMISSION_ERROR
        if kinds and kinds <= {FailureKind.NETWORK, FailureKind.TIMEOUT}:
            return ExitCode.NETWORK_ERROR
        return ExitCode.GENERAL_ERROR

"""
Client for the external contact directory lookup tools.

The tools are separate executables (Swift scripts reading the system
address book). Requests are passed as an argument array, never through a
shell, and every call is bounded by a timeout. Tool output is decoded here,
once, into a LookupOutcome so raw sentinel strings never leave this module.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from dataclasses import dataclass

from reconnect.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

NOT_FOUND = "NOT_FOUND"
UNNAMED_CONTACT = "UNNAMED_CONTACT"
ERROR_PREFIX = "ERROR"

# Older builds of the lookup tool print these for contacts without a name
_UNNAMED_SENTINELS = {UNNAMED_CONTACT, "Unknown Contact", "missing value missing value"}


class DirectoryLookupError(Exception):
    """Raised when a lookup process fails, times out, or prints unusable output."""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


@dataclass(frozen=True, slots=True)
class Found:
    name: str


@dataclass(frozen=True, slots=True)
class NotFound:
    pass


@dataclass(frozen=True, slots=True)
class Unnamed:
    pass


@dataclass(frozen=True, slots=True)
class LookupFailed:
    message: str


LookupOutcome = Found | NotFound | Unnamed | LookupFailed


@dataclass(frozen=True, slots=True)
class LookupRequest:
    """One identifier plus the spellings the directory should try for it."""

    identifier: str
    search_strings: tuple[str, ...] = ()

    def to_argv(self, command: Sequence[str]) -> list[str]:
        return [*command, self.identifier, *self.search_strings]


@dataclass(frozen=True, slots=True)
class BatchLookupRequest:
    identifiers: tuple[str, ...]

    def to_argv(self, command: Sequence[str]) -> list[str]:
        return [*command, *self.identifiers]


def decode_lookup_output(output: str | None) -> LookupOutcome:
    """Map one line of tool output onto the outcome variant."""
    cleaned = " ".join((output or "").split())
    if not cleaned:
        return LookupFailed("empty output")
    if cleaned == NOT_FOUND:
        return NotFound()
    if cleaned in _UNNAMED_SENTINELS:
        return Unnamed()
    if cleaned == ERROR_PREFIX or cleaned.startswith(f"{ERROR_PREFIX}:"):
        return LookupFailed(cleaned.partition(":")[2].strip() or cleaned)
    return Found(cleaned)


def decode_batch_output(output: str, identifiers: Sequence[str]) -> dict[str, LookupOutcome]:
    """
    Decode the batch tool's JSON object, one outcome per requested identifier.

    Raises:
        DirectoryLookupError: the output as a whole is not a JSON object.
    """
    try:
        payload = json.loads(output)
    except (TypeError, ValueError) as e:
        raise DirectoryLookupError(f"Unparseable batch output: {e}", operation="batch") from e
    if not isinstance(payload, dict):
        raise DirectoryLookupError("Batch output is not a JSON object", operation="batch")

    outcomes: dict[str, LookupOutcome] = {}
    for identifier in identifiers:
        value = payload.get(identifier)
        if value is None:
            outcomes[identifier] = NotFound()
        elif isinstance(value, str):
            outcomes[identifier] = decode_lookup_output(value)
        else:
            outcomes[identifier] = LookupFailed(f"unexpected value type {type(value).__name__}")
    return outcomes


class DirectoryLookupClient:
    """Runs the lookup executables as subprocesses."""

    def __init__(
        self,
        command: Sequence[str],
        batch_command: Sequence[str],
        cwd: str | None = None,
        timeout_seconds: float = 5.0,
        batch_timeout_seconds: float = 10.0,
        batch_timeout_per_identifier_seconds: float = 0.1,
    ):
        self.command = list(command)
        self.batch_command = list(batch_command)
        self.cwd = cwd
        self.timeout_seconds = timeout_seconds
        self.batch_timeout_seconds = batch_timeout_seconds
        self.batch_timeout_per_identifier_seconds = batch_timeout_per_identifier_seconds

    def batch_timeout_for(self, count: int) -> float:
        extra = max(0, count - 1) * self.batch_timeout_per_identifier_seconds
        return self.batch_timeout_seconds + extra

    async def lookup(self, request: LookupRequest) -> LookupOutcome:
        stdout = await self._run(
            request.to_argv(self.command), self.timeout_seconds, operation="single"
        )
        return decode_lookup_output(stdout)

    async def lookup_batch(self, request: BatchLookupRequest) -> dict[str, LookupOutcome]:
        if not request.identifiers:
            return {}
        stdout = await self._run(
            request.to_argv(self.batch_command),
            self.batch_timeout_for(len(request.identifiers)),
            operation="batch",
        )
        return decode_batch_output(stdout.strip(), request.identifiers)

    async def _run(self, argv: list[str], timeout: float, operation: str) -> str:
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.cwd,
            )
        except OSError as e:
            raise DirectoryLookupError(f"Could not start lookup tool: {e}", operation) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except TimeoutError as e:
            await self._kill(process)
            raise DirectoryLookupError(
                f"Lookup timed out after {timeout:.1f}s", operation
            ) from e
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        error_text = stderr.decode("utf-8", "replace").strip()
        if process.returncode != 0 or error_text:
            raise DirectoryLookupError(
                error_text or f"Lookup tool exited with status {process.returncode}",
                operation,
            )

        return stdout.decode("utf-8", "replace")

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        """Kill and reap a lookup process that is no longer wanted."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

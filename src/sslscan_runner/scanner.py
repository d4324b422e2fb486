"""
Process supervision for the sslscan binary.

A Scanner resolves the binary once at construction, then each run()
spawns one sslscan process, races its exit against the request's
cancel event / timeout, and returns a ScanOutcome. The exit status of
sslscan is recorded but never inspected: success or failure is decided
by whether stdout decodes.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from dataclasses import dataclass, field, replace
from enum import Enum

from .errors import (
    ParseError,
    ParseOutputError,
    ScanStartError,
    ScanTimeoutError,
    SSLScanError,
    ToolNotFoundError,
)
from .models import ScanResult
from .parser import parse
from .utils import split_warnings

logger = logging.getLogger(__name__)

BINARY_NAME = "sslscan"

# Forces the XML document onto stdout
XML_STDOUT_FLAG = "--xml=-"


@dataclass(frozen=True)
class ScanRequest:
    """
    Immutable scan configuration. The with_* methods return a new request
    and leave the receiver untouched, so a base request can be shared
    between concurrent scans.
    """
    target: str = ""
    args: tuple[str, ...] = ()
    timeout: float | None = None
    cancel_event: asyncio.Event | None = field(default=None, compare=False, repr=False)
    binary_path: str | None = None

    def with_target(self, target: str) -> ScanRequest:
        return replace(self, target=target)

    def with_args(self, *args: str) -> ScanRequest:
        return replace(self, args=tuple(args))

    def add_args(self, *args: str) -> ScanRequest:
        return replace(self, args=self.args + tuple(args))

    def with_timeout(self, seconds: float | None) -> ScanRequest:
        return replace(self, timeout=seconds)

    def with_cancel_event(self, event: asyncio.Event | None) -> ScanRequest:
        return replace(self, cancel_event=event)

    def with_binary_path(self, path: str | None) -> ScanRequest:
        return replace(self, binary_path=path)

    def with_sni(self, name: str) -> ScanRequest:
        return self.add_args(f"--sni-name={name}")

    def with_show_certificate(self) -> ScanRequest:
        return self.add_args("--show-certificate")

    def with_starttls(self, protocol: str) -> ScanRequest:
        return self.add_args(f"--starttls-{protocol}")


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    START_FAILURE = "start_failure"
    CANCELLED = "cancelled"
    DECODE_FAILURE = "decode_failure"


@dataclass(frozen=True)
class ScanOutcome:
    """
    Result of one run. `kind` says which branch was taken; `error` holds
    the matching exception for every kind except SUCCESS. `raw` is the
    captured stdout, kept on DECODE_FAILURE so the input can be inspected
    without re-running the scan.
    """
    kind: OutcomeKind
    result: ScanResult | None = None
    warnings: tuple[str, ...] = ()
    error: SSLScanError | None = None
    raw: bytes | None = None
    returncode: int | None = None

    @property
    def ok(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def unwrap(self) -> ScanResult:
        """Return the decoded result or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.result


def resolve_binary(binary_path: str | None = None) -> str:
    # a bare name is looked up on PATH like the default binary
    if binary_path and not os.path.dirname(binary_path):
        found = shutil.which(binary_path)
        if not found:
            raise ToolNotFoundError(f"{binary_path} not found on PATH")
        return found

    if binary_path:
        if not os.path.isfile(binary_path):
            raise ToolNotFoundError(f"sslscan binary not found at {binary_path}")
        return binary_path

    found = shutil.which(BINARY_NAME)
    if not found:
        raise ToolNotFoundError(f"{BINARY_NAME} not found on PATH")
    logger.debug(f"Resolved {BINARY_NAME} to {found}")
    return found


def build_args(request: ScanRequest) -> list[str]:
    """XML flag first, caller arguments next, target always last."""
    return [XML_STDOUT_FLAG, *request.args, request.target]


async def _kill(proc: asyncio.subprocess.Process, communicate: asyncio.Future) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    communicate.cancel()
    await asyncio.gather(communicate, return_exceptions=True)
    await proc.wait()


class Scanner:
    """
    Runs sslscan for one ScanRequest.

    Construction fails with ToolNotFoundError if the binary cannot be
    found and with ValueError if the request has no target; in both cases
    nothing has been spawned.
    """

    def __init__(self, request: ScanRequest):
        if not request.target:
            raise ValueError("scan target is empty")
        self.request = request
        self.binary_path = resolve_binary(request.binary_path)

    @property
    def args(self) -> list[str]:
        return build_args(self.request)

    async def run(self) -> ScanOutcome:
        args = self.args
        logger.info(f"Running sslscan: {self.binary_path} {' '.join(args)}")

        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary_path,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return ScanOutcome(
                kind=OutcomeKind.START_FAILURE,
                error=ScanStartError(self.binary_path, e),
            )

        communicate = asyncio.ensure_future(proc.communicate())
        waiters: set[asyncio.Future] = {communicate}
        cancelled = None
        if self.request.cancel_event is not None:
            cancelled = asyncio.ensure_future(self.request.cancel_event.wait())
            waiters.add(cancelled)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.request.timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await _kill(proc, communicate)
            raise
        finally:
            if cancelled is not None and not cancelled.done():
                cancelled.cancel()
                await asyncio.gather(cancelled, return_exceptions=True)

        # A set cancel event wins even if the process exited in the same tick
        if communicate not in done or (cancelled is not None and cancelled in done):
            await _kill(proc, communicate)
            logger.info(f"sslscan scan of {self.request.target} cancelled before completion")
            return ScanOutcome(
                kind=OutcomeKind.CANCELLED,
                error=ScanTimeoutError(
                    f"sslscan scan of {self.request.target} was cancelled or timed out"
                ),
                returncode=proc.returncode,
            )

        stdout, stderr = communicate.result()
        logger.debug(
            f"sslscan exited with code {proc.returncode} "
            f"({len(stdout)} bytes stdout, {len(stderr)} bytes stderr)"
        )

        warnings = split_warnings(stderr)
        try:
            result = parse(stdout)
        except ParseError as e:
            warnings.append(str(e))
            logger.info(f"Could not parse sslscan output for {self.request.target}: {e}")
            return ScanOutcome(
                kind=OutcomeKind.DECODE_FAILURE,
                warnings=tuple(warnings),
                error=ParseOutputError(e),
                raw=stdout,
                returncode=proc.returncode,
            )

        return ScanOutcome(
            kind=OutcomeKind.SUCCESS,
            result=result,
            warnings=tuple(warnings),
            raw=stdout,
            returncode=proc.returncode,
        )

    def run_sync(self) -> ScanOutcome:
        return asyncio.run(self.run())


async def run(request: ScanRequest) -> ScanOutcome:
    """Build a Scanner for `request` and run it once."""
    return await Scanner(request).run()

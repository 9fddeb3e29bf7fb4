"""External process invocation for ffmpeg/ffprobe."""

from __future__ import annotations

import asyncio
import subprocess
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

import structlog

logger = structlog.get_logger()


@dataclass
class ProcessResult:
    args: list[str]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    error: str | None = None  # launch failure or timeout

    @property
    def ok(self) -> bool:
        return self.error is None and self.returncode == 0

    def describe_failure(self, tail: int = 500) -> str:
        if self.error:
            return self.error
        return f"exit code {self.returncode}: {self.stderr[-tail:].strip()}"


ProcessRunner = Callable[[Sequence[str], float | None], Awaitable[ProcessResult]]


def _run_sync(args: list[str], timeout: float | None) -> ProcessResult:
    try:
        completed = subprocess.run(
            args, capture_output=True, text=True, encoding="utf-8", errors="replace", timeout=timeout
        )
    except FileNotFoundError:
        return ProcessResult(args=args, returncode=None, error=f"executable not found: {args[0]}")
    except subprocess.TimeoutExpired:
        return ProcessResult(args=args, returncode=None, error=f"timed out after {timeout}s")
    except OSError as exc:
        return ProcessResult(args=args, returncode=None, error=f"failed to start {args[0]}: {exc}")
    return ProcessResult(
        args=args,
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )


async def run_process(args: Sequence[str], timeout: float | None = None) -> ProcessResult:
    """Run *args* to completion in a worker thread.

    Blocks only the calling task. Launch failures and timeouts are returned
    on the result instead of raised.
    """
    args = [str(a) for a in args]
    logger.debug("process.start", executable=args[0], argc=len(args))
    result = await asyncio.to_thread(_run_sync, args, timeout)
    logger.debug("process.done", executable=args[0], returncode=result.returncode, error=result.error)
    return result

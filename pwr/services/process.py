import logging
import subprocess
import time
from typing import Sequence

from pwr.core.config import settings
from pwr.exceptions.transition import ChildProcessLaunchFailed
from pwr.models.profile import ProcessResult

log = logging.getLogger("pwr.process")


class ProcessRunner:
    """Runs one external tool at a time and waits for it, bounded by a timeout."""

    def __init__(self, timeout: float = settings.CHILD_TIMEOUT_SEC):
        self.timeout = timeout

    def run(self, argv: Sequence[str]) -> ProcessResult:
        argv = tuple(argv)
        log.debug("exec %s (timeout %.1fs)", " ".join(argv), self.timeout)
        start = time.monotonic()
        try:
            proc = subprocess.run(
                argv,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            # subprocess.run kills the child before re-raising
            elapsed = time.monotonic() - start
            log.warning("%s timed out after %.1fs, killed", argv[0], elapsed)
            return ProcessResult(
                argv=argv,
                returncode=None,
                elapsed_s=elapsed,
                timed_out=True,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
            )
        except OSError as e:
            raise ChildProcessLaunchFailed(argv, e.strerror or str(e)) from e

        result = ProcessResult(
            argv=argv,
            returncode=proc.returncode,
            elapsed_s=time.monotonic() - start,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
        if result.stdout.strip():
            log.debug("[%s] %s", argv[0], result.stdout.strip())
        if result.stderr.strip():
            if result.ok:
                log.debug("[%s] %s", argv[0], result.stderr.strip())
            else:
                log.warning("[%s] %s", argv[0], result.stderr.strip())
        log.debug("%s exited %s in %.3fs", argv[0], result.returncode, result.elapsed_s)
        return result


def _decode(data) -> str:
    # TimeoutExpired carries bytes even when text=True was requested
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode(errors="replace")
    return data

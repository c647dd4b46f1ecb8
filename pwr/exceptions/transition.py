import logging
import sys
import time
from typing import Optional, Dict, Any, TextIO

log = logging.getLogger("pwr.exceptions")

# Process exit codes; every fatal kind gets its own
EXIT_OK = 0
EXIT_NO_ACTION = 1
EXIT_BAD_ARG = 2
EXIT_GOVERNOR_WRITE = 3
EXIT_STATE_WRITE = 4
EXIT_STATE_READ = 5
EXIT_CHILD_LAUNCH = 6
EXIT_PRIVILEGE = 7
EXIT_INTERNAL = 70

class PwrException(Exception):
    """Base pwr exception with error context"""
    def __init__(
        self,
        message: str,
        exit_code: int = EXIT_INTERNAL,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        timestamp: Optional[float] = None
    ):
        self.message = message
        self.exit_code = exit_code
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}
        self.timestamp = timestamp or time.time()
        super().__init__(self.message)

class NoActionSpecified(PwrException):
    """No action token on the command line"""
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__("No action specified", EXIT_NO_ACTION, "NO_ACTION", context)

class BadArgument(PwrException):
    """Unrecognised or conflicting command-line token"""
    def __init__(self, message: str, argument: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = {"argument": argument, **(context or {})} if argument else (context or {})
        super().__init__(f"Bad argument: {message}", EXIT_BAD_ARG, "BAD_ARGUMENT", ctx)

class GovernorWriteFailed(PwrException):
    """A scaling_governor file exists but could not be written"""
    def __init__(self, path: str, reason: str, context: Optional[Dict[str, Any]] = None):
        ctx = {"path": path, **(context or {})}
        super().__init__(f"Could not set CPU governor via {path}: {reason}", EXIT_GOVERNOR_WRITE, "GOVERNOR_WRITE_FAILED", ctx)

class StateWriteFailed(PwrException):
    """Profile record could not be written; hardware may already be switched"""
    def __init__(self, path: str, reason: str, context: Optional[Dict[str, Any]] = None):
        ctx = {"path": path, **(context or {})}
        super().__init__(f"Could not save profile state to {path}: {reason}", EXIT_STATE_WRITE, "STATE_WRITE_FAILED", ctx)

class StateReadFailed(PwrException):
    """Profile record exists but could not be read"""
    def __init__(self, path: str, reason: str, context: Optional[Dict[str, Any]] = None):
        ctx = {"path": path, **(context or {})}
        super().__init__(f"Could not read profile state from {path}: {reason}", EXIT_STATE_READ, "STATE_READ_FAILED", ctx)

class ChildProcessLaunchFailed(PwrException):
    """External tool could not be started at all"""
    def __init__(self, argv, reason: str, context: Optional[Dict[str, Any]] = None):
        ctx = {"argv": list(argv), **(context or {})}
        super().__init__(f"Could not launch {argv[0]}: {reason}", EXIT_CHILD_LAUNCH, "CHILD_LAUNCH_FAILED", ctx)

class PrivilegeElevationFailed(PwrException):
    """Effective uid could not be raised to the administrative uid"""
    def __init__(self, target_uid: int, reason: str, context: Optional[Dict[str, Any]] = None):
        ctx = {"target_uid": target_uid, **(context or {})}
        super().__init__(
            f"Could not elevate privileges to uid {target_uid}: {reason} (is pwr running as root?)",
            EXIT_PRIVILEGE, "PRIVILEGE_ELEVATION_FAILED", ctx,
        )

# Exception handlers
def pwr_exception_handler(exc: PwrException, prog: str = "pwr", stream: Optional[TextIO] = None) -> int:
    """Print the one-line diagnostic for a fatal pwr error and return its exit code"""
    # the printed line is the user-facing report; the record keeps the context
    log.debug(
        f"pwr exception [{exc.error_code}]: {exc.message}",
        extra={
            "error_code": exc.error_code,
            "exit_code": exc.exit_code,
            "context": exc.context,
            "timestamp": exc.timestamp
        }
    )
    out = stream or sys.stderr
    print(f"{prog}: {exc.message}", file=out)
    if isinstance(exc, (NoActionSpecified, BadArgument)):
        print(f"Run `{prog} --help` for help.", file=out)
    return exc.exit_code

def general_exception_handler(exc: Exception, prog: str = "pwr", stream: Optional[TextIO] = None) -> int:
    """Last-resort handler for anything that is not a PwrException"""
    log.error(
        f"Unexpected error: {str(exc)}",
        exc_info=exc,
        extra={
            "error_type": exc.__class__.__name__,
            "timestamp": time.time()
        }
    )
    print(f"{prog}: unexpected error: {exc}", file=stream or sys.stderr)
    return EXIT_INTERNAL

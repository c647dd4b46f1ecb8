import argparse
import logging
import sys
from typing import List, Optional, TextIO

from pwr.core.config import Settings, settings
from pwr.core.logging import setup_logging
from pwr.dependencies import get_orchestrator
from pwr.exceptions.transition import (
    EXIT_OK, BadArgument, NoActionSpecified, PwrException,
    general_exception_handler, pwr_exception_handler,
)
from pwr.models.profile import ACTION_TOKENS, Action, Invocation, Profile
from pwr.services.capability import CapabilityProbe
from pwr.services.privilege import PrivilegeElevator
from pwr.services.process import ProcessRunner

log = logging.getLogger("pwr.main")

ACTIONS_HELP = """\
actions:
  perform (pe)      Go into performance mode.
  powersave (ps)    Go into power-saving mode.
  toggle (to)       Toggle the current state.
  query (qu)        Print the current state: 'performance' or 'powersave'.
"""

VERSION_NOTICE = """\
Copyright 2018 Ethan McTague.
Licensed under the MIT License.
https://github.com/emctague/pwr"""

class _ArgumentParser(argparse.ArgumentParser):
    # argparse would print and exit(2); raise instead so one handler reports every error
    def error(self, message):
        raise BadArgument(message)

def _action_token(token: str) -> Action:
    try:
        return ACTION_TOKENS[token]
    except KeyError:
        raise argparse.ArgumentTypeError(f"unknown action '{token}'")

def build_parser(prog: str = settings.APP_NAME, version: str = settings.VERSION) -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog=prog,
        description=f"{prog} - Switches between performance and power-saving modes.",
        epilog=ACTIONS_HELP,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("action", nargs="?", type=_action_token, metavar="action",
                        help="one of the actions listed below")
    parser.add_argument("-n", "--norestart", dest="no_restart", action="store_true",
                        help="do not restart the display manager after changing modes")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="log every step to stderr")
    parser.add_argument("--version", action="version",
                        version=f"{prog} v{version}\n{VERSION_NOTICE}")
    return parser

def parse_args(argv: Optional[List[str]] = None, parser: Optional[argparse.ArgumentParser] = None) -> Invocation:
    parser = parser or build_parser()
    ns = parser.parse_args(argv)
    if ns.action is None:
        raise NoActionSpecified()
    return Invocation(action=ns.action, no_restart=ns.no_restart, verbose=ns.verbose)

def main(
    argv: Optional[List[str]] = None,
    cfg: Optional[Settings] = None,
    runner: Optional[ProcessRunner] = None,
    probe: Optional[CapabilityProbe] = None,
    elevator: Optional[PrivilegeElevator] = None,
    stdout: Optional[TextIO] = None,
) -> int:
    cfg = cfg or settings
    prog = cfg.APP_NAME
    setup_logging(cfg.LOG_LEVEL)

    try:
        invocation = parse_args(argv, build_parser(prog, cfg.VERSION))
    except SystemExit as e:
        # --help / --version
        return e.code if isinstance(e.code, int) else EXIT_OK
    except PwrException as e:
        return pwr_exception_handler(e, prog)

    if invocation.verbose:
        setup_logging("DEBUG")
    log.debug("invocation: %s", invocation)

    try:
        orchestrator = get_orchestrator(invocation, cfg, runner=runner, probe=probe, elevator=elevator)
        result = orchestrator.execute(invocation.action)
    except PwrException as e:
        return pwr_exception_handler(e, prog)
    except Exception as e:
        return general_exception_handler(e, prog)

    if isinstance(result, Profile):
        print(result.value, file=stdout or sys.stdout)
    return EXIT_OK

def run() -> None:
    sys.exit(main())

if __name__ == "__main__":
    run()

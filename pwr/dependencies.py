"""
Service wiring for one pwr invocation.
Builds the orchestrator from settings plus the parsed command line; nothing is shared between runs.
"""
import logging
from typing import Optional

from pwr.core.config import Settings, settings as default_settings
from pwr.models.profile import Invocation
from pwr.services.actuators import build_actuators
from pwr.services.capability import CapabilityProbe
from pwr.services.orchestrator import TransitionOrchestrator
from pwr.services.privilege import PrivilegeElevator
from pwr.services.process import ProcessRunner
from pwr.services.state_store import ProfileStateStore

log = logging.getLogger("pwr.dependencies")


def get_state_store(cfg: Optional[Settings] = None) -> ProfileStateStore:
    cfg = cfg or default_settings
    return ProfileStateStore(cfg.STATE_FILE)


def get_orchestrator(
    invocation: Invocation,
    cfg: Optional[Settings] = None,
    runner: Optional[ProcessRunner] = None,
    probe: Optional[CapabilityProbe] = None,
    elevator: Optional[PrivilegeElevator] = None,
) -> TransitionOrchestrator:
    """
    Assemble actuators, state store and privilege elevator.
    Runner, probe and elevator can be swapped out; tests use that to avoid touching the machine.
    """
    cfg = cfg or default_settings
    runner = runner or ProcessRunner(cfg.CHILD_TIMEOUT_SEC)
    probe = probe or CapabilityProbe(cfg.WIRELESS_PREFIX)
    elevator = elevator or PrivilegeElevator(cfg.ADMIN_UID)

    actuators = build_actuators(probe, runner, no_restart=invocation.no_restart, cfg=cfg)
    log.debug("actuators: %s", [a.name for a in actuators])
    return TransitionOrchestrator(actuators, get_state_store(cfg), elevator)

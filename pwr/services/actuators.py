"""
Device actuators: one class per OS knob touched by a profile switch.

Each actuator is idempotent and owns a disjoint subsystem. Missing capability
means skip. Only the CPU governor actuator turns an I/O problem into a fatal
error; the tool-driven actuators report a failed outcome and let the
transition continue.
"""
import glob
import logging
from typing import List, Optional

from pwr.core.config import Settings, settings as default_settings
from pwr.exceptions.transition import GovernorWriteFailed
from pwr.models.profile import ActuatorOutcome, ActuatorResult, Profile, ProcessResult
from pwr.services.capability import CapabilityProbe
from pwr.services.process import ProcessRunner

log = logging.getLogger("pwr.actuators")


class Actuator:
    name = "actuator"

    def apply(self, profile: Profile) -> ActuatorOutcome:
        raise NotImplementedError

    def _skip(self, detail: str) -> ActuatorOutcome:
        log.info("%s: skipped (%s)", self.name, detail)
        return ActuatorOutcome(name=self.name, result=ActuatorResult.skipped, detail=detail)


class ToolActuator(Actuator):
    """Actuator backed by an external executable; tool failures are non-fatal."""

    def __init__(self, tool_path: str, probe: CapabilityProbe, runner: ProcessRunner):
        self.tool_path = tool_path
        self.probe = probe
        self.runner = runner

    def _invoke(self, *args: str) -> ActuatorOutcome:
        result = self.runner.run((self.tool_path, *args))
        if result.ok:
            log.info("%s: applied (%s)", self.name, " ".join(args))
            return ActuatorOutcome(
                name=self.name, result=ActuatorResult.applied, detail=" ".join(args), process=result
            )
        detail = _failure_detail(result)
        log.warning("%s: %s failed (%s), continuing", self.name, self.tool_path, detail)
        return ActuatorOutcome(name=self.name, result=ActuatorResult.failed, detail=detail, process=result)


class CpuGovernorActuator(Actuator):
    name = "cpu_governor"

    def __init__(self, pattern: str = default_settings.GOVERNOR_GLOB):
        self.pattern = pattern

    def governor_files(self) -> List[str]:
        return sorted(glob.glob(self.pattern))

    def apply(self, profile: Profile) -> ActuatorOutcome:
        files = self.governor_files()
        if not files:
            return self._skip(f"no files match {self.pattern}")

        for path in files:
            try:
                with open(path, "w") as f:
                    f.write(f"{profile.governor}\n")
            except OSError as e:
                raise GovernorWriteFailed(
                    path, e.strerror or str(e), {"governor": profile.governor}
                ) from e
            log.debug("%s <- %s", path, profile.governor)

        log.info("%s: applied %s to %d cpu(s)", self.name, profile.governor, len(files))
        return ActuatorOutcome(
            name=self.name,
            result=ActuatorResult.applied,
            detail=f"{profile.governor} x{len(files)}",
        )


class GpuSelectActuator(ToolActuator):
    name = "gpu_select"

    def apply(self, profile: Profile) -> ActuatorOutcome:
        if not self.probe.executable_available(self.tool_path):
            return self._skip(f"{self.tool_path} not available")
        # prime-select usually wants a reboot before the switch is visible
        return self._invoke(profile.gpu_vendor)


class WirelessPowerActuator(ToolActuator):
    name = "wireless_power"

    def apply(self, profile: Profile) -> ActuatorOutcome:
        if not self.probe.executable_available(self.tool_path):
            return self._skip(f"{self.tool_path} not available")
        iface = self.probe.wireless_interface_name()
        if iface is None:
            return self._skip("no wireless interface found")
        return self._invoke(iface, "power", profile.wireless_power)


class DisplayManagerActuator(ToolActuator):
    name = "display_manager"

    def __init__(
        self,
        tool_path: str,
        probe: CapabilityProbe,
        runner: ProcessRunner,
        service: str = default_settings.DISPLAY_MANAGER_SERVICE,
        no_restart: bool = False,
    ):
        super().__init__(tool_path, probe, runner)
        self.service = service
        self.no_restart = no_restart

    def apply(self, profile: Profile) -> ActuatorOutcome:
        if self.no_restart:
            return self._skip("restart disabled by --norestart")
        if not self.probe.executable_available(self.tool_path):
            return self._skip(f"{self.tool_path} not available")
        return self._invoke("restart", self.service)


def build_actuators(
    probe: CapabilityProbe,
    runner: ProcessRunner,
    no_restart: bool = False,
    cfg: Optional[Settings] = None,
) -> List[Actuator]:
    """Actuators in transition order; the display-manager restart is always last."""
    cfg = cfg or default_settings
    return [
        CpuGovernorActuator(cfg.GOVERNOR_GLOB),
        GpuSelectActuator(cfg.PRIME_SELECT_PATH, probe, runner),
        WirelessPowerActuator(cfg.IWCONFIG_PATH, probe, runner),
        DisplayManagerActuator(
            cfg.SYSTEMCTL_PATH, probe, runner,
            service=cfg.DISPLAY_MANAGER_SERVICE,
            no_restart=no_restart,
        ),
    ]


def _failure_detail(result: ProcessResult) -> str:
    if result.timed_out:
        return f"timed out after {result.elapsed_s:.1f}s"
    return f"exit status {result.returncode}"

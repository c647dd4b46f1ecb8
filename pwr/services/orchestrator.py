"""
Profile transition orchestration.

A transition runs every actuator in order under elevated privilege and only
then commits the new profile to the state store. A fatal error anywhere in
that sequence propagates with the record untouched, so the record always
names the last transition that completed.
"""
import logging
from typing import List, Optional, Union

from pwr.models.profile import Action, Profile, TransitionReport
from pwr.services.actuators import Actuator
from pwr.services.privilege import PrivilegeElevator
from pwr.services.state_store import ProfileStateStore
from pwr.services.types import ProfileState

log = logging.getLogger("pwr.orchestrator")


class TransitionOrchestrator:
    """
    Sequences the actuators for a profile and commits the result.

    Key responsibilities:
    - Run actuators strictly in order, one at a time, under elevated privilege
    - Write the state record only after every actuator has returned
    - Resolve toggle against the stored profile (anything but powersave counts as performance)
    """

    def __init__(
        self,
        actuators: List[Actuator],
        state_store: ProfileStateStore,
        elevator: PrivilegeElevator,
    ):
        self.actuators = list(actuators)
        self.state_store = state_store
        self.elevator = elevator
        self._state: Optional[ProfileState] = None

    @property
    def state(self) -> ProfileState:
        """'performance' | 'powersave' | 'transitioning'"""
        if self._state is None:
            self._state = self.state_store.read().value
        return self._state

    def transition(self, profile: Profile) -> TransitionReport:
        log.info("switching to %s", profile.value)
        self._state = "transitioning"
        report = TransitionReport(profile=profile)

        with self.elevator.elevated():
            for actuator in self.actuators:
                report.outcomes.append(actuator.apply(profile))
            # record lives in a root-owned directory by default
            self.state_store.write(profile)

        report.committed = True
        self._state = profile.value
        log.info(
            "now in %s (%s)",
            profile.value,
            ", ".join(f"{o.name}={o.result.value}" for o in report.outcomes),
        )
        return report

    def perform(self) -> TransitionReport:
        return self.transition(Profile.performance)

    def powersave(self) -> TransitionReport:
        return self.transition(Profile.powersave)

    def toggle(self) -> TransitionReport:
        current = self.state_store.read()
        if current is Profile.powersave:
            return self.perform()
        return self.powersave()

    def query(self) -> Profile:
        return self.state_store.read()

    def execute(self, action: Action) -> Union[TransitionReport, Profile]:
        if action is Action.perform:
            return self.perform()
        if action is Action.powersave:
            return self.powersave()
        if action is Action.toggle:
            return self.toggle()
        if action is Action.query:
            return self.query()
        raise ValueError(f"unknown action: {action!r}")

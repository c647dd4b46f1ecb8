from enum import Enum
from typing import Optional, List, Tuple
from pydantic import BaseModel, ConfigDict, Field

class Profile(str, Enum):
    performance = "performance"
    powersave = "powersave"

    @property
    def governor(self) -> str:
        return self.value

    @property
    def gpu_vendor(self) -> str:
        return "nvidia" if self is Profile.performance else "intel"

    @property
    def wireless_power(self) -> str:
        # iwconfig power management: on saves power, off favours latency
        return "off" if self is Profile.performance else "on"

    @property
    def opposite(self) -> "Profile":
        return Profile.powersave if self is Profile.performance else Profile.performance

class Action(str, Enum):
    perform = "perform"
    powersave = "powersave"
    toggle = "toggle"
    query = "query"

# Accepted command-line tokens, long form and two-letter short form
ACTION_TOKENS = {
    "perform": Action.perform,
    "pe": Action.perform,
    "powersave": Action.powersave,
    "ps": Action.powersave,
    "toggle": Action.toggle,
    "to": Action.toggle,
    "query": Action.query,
    "qu": Action.query,
}

class ActuatorResult(str, Enum):
    applied = "applied"
    skipped = "skipped"
    failed = "failed"

class Invocation(BaseModel):
    """Everything the command line decided, fixed once parsing is done."""
    model_config = ConfigDict(frozen=True)

    action: Action
    no_restart: bool = False
    verbose: bool = False

class ProcessResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    argv: Tuple[str, ...]
    returncode: Optional[int] = Field(None, description="None when the child was killed on timeout")
    elapsed_s: float = 0.0
    timed_out: bool = False
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.returncode == 0

class ActuatorOutcome(BaseModel):
    name: str
    result: ActuatorResult
    detail: Optional[str] = None
    process: Optional[ProcessResult] = None

class TransitionReport(BaseModel):
    profile: Profile
    outcomes: List[ActuatorOutcome] = []
    committed: bool = False

    def outcome(self, name: str) -> Optional[ActuatorOutcome]:
        for o in self.outcomes:
            if o.name == name:
                return o
        return None

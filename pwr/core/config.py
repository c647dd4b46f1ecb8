from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    APP_NAME: str = "pwr"
    VERSION: str = "1.1.0"
    LOG_LEVEL: str = "WARNING"

    # Persisted profile record; one line, "performance" or "powersave"
    STATE_FILE: str = "/var/lib/pwr_state"

    # ---- CPU governor ----
    # One scaling_governor file per logical CPU; no match means the knob is absent.
    GOVERNOR_GLOB: str = "/sys/devices/system/cpu/cpu*/cpufreq/scaling_governor"

    # ---- External tools ----
    # Explicit paths; no PATH lookup. A missing tool skips its step.
    SYSTEMCTL_PATH: str = "/bin/systemctl"
    PRIME_SELECT_PATH: str = "/usr/bin/prime-select"
    IWCONFIG_PATH: str = "/sbin/iwconfig"
    DISPLAY_MANAGER_SERVICE: str = "display-manager"

    # Interface-name prefix reserved for wireless devices (predictable naming: wlp2s0, wlan0)
    WIRELESS_PREFIX: str = "wl"

    # Upper bound on every child process; a hung tool is killed after this long.
    CHILD_TIMEOUT_SEC: float = Field(default=120.0, gt=0)

    # Effective uid required by the hardware-mutating steps
    ADMIN_UID: int = 0


    class Config:
        env_prefix = "PWR_"
        frozen = True

settings = Settings()

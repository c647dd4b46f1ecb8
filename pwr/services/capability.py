import logging
import os
from typing import Optional

import psutil

from pwr.core.config import settings

log = logging.getLogger("pwr.capability")


class CapabilityProbe:
    """
    Answers "is this control interface usable right now?".

    Nothing is cached: every actuator asks again on every call, so a tool
    installed or an interface brought up between two runs is picked up.
    """

    def __init__(self, wireless_prefix: str = settings.WIRELESS_PREFIX):
        self._wireless_prefix = wireless_prefix

    def executable_available(self, path: str) -> bool:
        ok = os.path.isfile(path) and os.access(path, os.X_OK)
        log.debug("executable %s -> %s", path, ok)
        return ok

    def wireless_interface_name(self) -> Optional[str]:
        """
        First interface whose name starts with the wireless prefix, or None.

        Name-based detection is a heuristic: renamed or oddly named adapters
        are missed, and a non-wireless device using the prefix would match.
        Callers treat None as "skip".
        """
        try:
            names = list(psutil.net_if_addrs())
        except OSError:
            log.warning("could not enumerate network interfaces", exc_info=True)
            return None

        for name in names:
            if name.startswith(self._wireless_prefix):
                log.debug("wireless interface: %s", name)
                return name
        log.debug("no wireless interface among %s", names)
        return None

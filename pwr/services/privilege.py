import logging
import os
from contextlib import contextmanager
from typing import Iterator, Optional

from pwr.core.config import settings
from pwr.exceptions.transition import PrivilegeElevationFailed

log = logging.getLogger("pwr.privilege")


class PrivilegeElevator:
    """
    Scoped effective-uid switch for the hardware-mutating part of a transition.

    The original effective uid is restored whether the body returns or raises.
    If the restore itself fails, its error is raised chained from the body's
    exception.
    """

    def __init__(self, admin_uid: int = settings.ADMIN_UID):
        self._admin_uid = admin_uid

    @property
    def admin_uid(self) -> int:
        return self._admin_uid

    @contextmanager
    def elevated(self) -> Iterator[int]:
        original = os.geteuid()
        changed = False
        if original != self._admin_uid:
            try:
                os.seteuid(self._admin_uid)
            except OSError as e:
                raise PrivilegeElevationFailed(
                    self._admin_uid, e.strerror or str(e), {"original_uid": original}
                ) from e
            changed = True
            log.debug("euid %d -> %d", original, self._admin_uid)
        try:
            yield original
        except BaseException as body_error:
            if changed:
                self._restore(original, cause=body_error)
            raise
        if changed:
            self._restore(original)

    def _restore(self, original: int, cause: Optional[BaseException] = None) -> None:
        try:
            os.seteuid(original)
        except OSError as e:
            log.error("could not restore euid %d: %s", original, e.strerror or e)
            if cause is not None:
                raise e from cause
            raise
        log.debug("euid restored to %d", original)

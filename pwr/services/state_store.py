import logging
import os
import tempfile
from typing import Optional

from pwr.core.config import settings
from pwr.exceptions.transition import StateReadFailed, StateWriteFailed
from pwr.models.profile import Profile

log = logging.getLogger("pwr.state")

# Earlier releases recorded the performance profile under this token
_LEGACY_TOKENS = {"perform": Profile.performance}


class ProfileStateStore:
    """
    Single-line record of the last committed profile.

    Absent or unusable content reads as performance. Writes replace the file
    atomically, so a reader never sees a half-written record.
    """

    def __init__(self, path: str = settings.STATE_FILE):
        self.path = path

    def read_raw(self) -> Optional[str]:
        try:
            with open(self.path, "r") as f:
                line = f.readline()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StateReadFailed(self.path, getattr(e, "strerror", None) or str(e)) from e
        return line.rstrip()

    def read(self) -> Profile:
        try:
            raw = self.read_raw()
        except StateReadFailed as e:
            log.warning("%s; assuming %s", e.message, Profile.performance.value)
            return Profile.performance

        if not raw:
            log.debug("no state at %s; assuming %s", self.path, Profile.performance.value)
            return Profile.performance
        if raw in _LEGACY_TOKENS:
            return _LEGACY_TOKENS[raw]
        try:
            return Profile(raw)
        except ValueError:
            log.warning("unrecognised state %r in %s; assuming %s", raw, self.path, Profile.performance.value)
            return Profile.performance

    def write(self, profile: Profile) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".pwr_state.", dir=directory)
            with os.fdopen(fd, "w") as f:
                f.write(f"{profile.value}\n")
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StateWriteFailed(self.path, e.strerror or str(e), {"profile": profile.value}) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        log.info("state %s <- %s", self.path, profile.value)

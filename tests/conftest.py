from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from pwr.core.config import Settings
from pwr.models.profile import ProcessResult
from pwr.services import capability
from pwr.services.capability import CapabilityProbe
from pwr.services.process import ProcessRunner


class RecordingRunner(ProcessRunner):
    """Records every launch instead of executing it; exit codes keyed by tool basename."""

    def __init__(self, exit_codes: Optional[Dict[str, int]] = None, timeouts: Sequence[str] = ()):
        super().__init__(timeout=1.0)
        self.calls: List[Tuple[str, ...]] = []
        self.exit_codes = exit_codes or {}
        self.timeouts = set(timeouts)
        self.on_run: Optional[Callable[[Tuple[str, ...]], None]] = None

    def run(self, argv: Sequence[str]) -> ProcessResult:
        argv = tuple(argv)
        self.calls.append(argv)
        if self.on_run:
            self.on_run(argv)
        tool = os.path.basename(argv[0])
        if tool in self.timeouts:
            return ProcessResult(argv=argv, returncode=None, elapsed_s=1.0, timed_out=True)
        return ProcessResult(argv=argv, returncode=self.exit_codes.get(tool, 0), elapsed_s=0.01)

    def calls_to(self, tool: str) -> List[Tuple[str, ...]]:
        return [c for c in self.calls if os.path.basename(c[0]) == tool]


@pytest.fixture
def cfg(tmp_path: Path) -> Settings:
    sys_root = tmp_path / "sys" / "devices" / "system" / "cpu"
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    return Settings(
        STATE_FILE=str(tmp_path / "var" / "lib" / "pwr_state"),
        GOVERNOR_GLOB=str(sys_root / "cpu*" / "cpufreq" / "scaling_governor"),
        SYSTEMCTL_PATH=str(bin_dir / "systemctl"),
        PRIME_SELECT_PATH=str(bin_dir / "prime-select"),
        IWCONFIG_PATH=str(bin_dir / "iwconfig"),
        CHILD_TIMEOUT_SEC=5.0,
        ADMIN_UID=os.geteuid(),
    )


@pytest.fixture
def make_cpus(cfg: Settings) -> Callable[..., List[Path]]:
    def _make(count: int = 4, governor: str = "schedutil") -> List[Path]:
        root = Path(cfg.GOVERNOR_GLOB.split("/cpu*/")[0])
        files = []
        for i in range(count):
            d = root / f"cpu{i}" / "cpufreq"
            d.mkdir(parents=True)
            f = d / "scaling_governor"
            f.write_text(f"{governor}\n", encoding="utf-8")
            files.append(f)
        return files
    return _make


@pytest.fixture
def install_tool() -> Callable[[str], Path]:
    def _install(path: str) -> Path:
        p = Path(path)
        p.write_text("#!/bin/sh\nexit 0\n", encoding="utf-8")
        p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return p
    return _install


@pytest.fixture
def install_all_tools(cfg: Settings, install_tool) -> None:
    for path in (cfg.SYSTEMCTL_PATH, cfg.PRIME_SELECT_PATH, cfg.IWCONFIG_PATH):
        install_tool(path)


@pytest.fixture
def interfaces(monkeypatch: pytest.MonkeyPatch) -> Callable[..., None]:
    def _set(*names: str) -> None:
        monkeypatch.setattr(capability.psutil, "net_if_addrs", lambda: {n: [] for n in names})
    _set("lo", "enp3s0", "wlp2s0")
    return _set


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def probe(cfg: Settings, interfaces) -> CapabilityProbe:
    return CapabilityProbe(cfg.WIRELESS_PREFIX)

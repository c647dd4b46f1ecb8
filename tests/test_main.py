from pathlib import Path

import pytest

from pwr.exceptions.transition import BadArgument, NoActionSpecified
from pwr.main import build_parser, main, parse_args
from pwr.models.profile import Action


def _run(argv, cfg, runner, probe):
    return main(argv, cfg=cfg, runner=runner, probe=probe)


# ---- argument parsing ----

@pytest.mark.parametrize(
    "token,action",
    [
        ("perform", Action.perform), ("pe", Action.perform),
        ("powersave", Action.powersave), ("ps", Action.powersave),
        ("toggle", Action.toggle), ("to", Action.toggle),
        ("query", Action.query), ("qu", Action.query),
    ],
)
def test_action_tokens(token, action) -> None:
    assert parse_args([token]).action is action


def test_norestart_flag_in_any_position() -> None:
    assert parse_args(["-n", "pe"]).no_restart is True
    assert parse_args(["perform", "--norestart"]).no_restart is True
    assert parse_args(["perform"]).no_restart is False


def test_invocation_is_immutable() -> None:
    invocation = parse_args(["ps"])
    with pytest.raises(Exception):
        invocation.no_restart = True


def test_missing_action_raises() -> None:
    with pytest.raises(NoActionSpecified):
        parse_args([])
    with pytest.raises(NoActionSpecified):
        parse_args(["-n"])


@pytest.mark.parametrize(
    "argv",
    [["turbo"], ["--frobnicate"], ["pe", "ps"], ["pe", "--norest"], ["pe", "--nor"], ["ps", "--verb"]],
)
def test_bad_arguments_raise(argv) -> None:
    with pytest.raises(BadArgument):
        parse_args(argv)


# ---- exit codes ----

def test_no_action_exits_1(cfg, runner, probe, capsys) -> None:
    assert _run([], cfg, runner, probe) == 1
    err = capsys.readouterr().err
    assert "No action specified" in err
    assert "--help" in err


def test_bad_argument_exits_2_before_any_side_effect(cfg, make_cpus, install_all_tools, runner, probe, capsys) -> None:
    files = make_cpus(1)
    assert _run(["turbo"], cfg, runner, probe) == 2
    assert "turbo" in capsys.readouterr().err
    assert runner.calls == []
    assert files[0].read_text(encoding="utf-8") == "schedutil\n"


def test_help_and_version_have_no_side_effects(cfg, runner, probe, capsys) -> None:
    assert _run(["--help"], cfg, runner, probe) == 0
    out = capsys.readouterr().out
    assert "powersave (ps)" in out
    assert "--norestart" in out

    assert _run(["--version"], cfg, runner, probe) == 0
    version_lines = capsys.readouterr().out.splitlines()
    assert version_lines[0] == f"{cfg.APP_NAME} v{cfg.VERSION}"
    assert version_lines[1].startswith("Copyright")
    assert version_lines[-1] == "https://github.com/emctague/pwr"

    assert runner.calls == []
    assert not Path(cfg.STATE_FILE).exists()


def test_governor_failure_exits_3_with_one_line(cfg, make_cpus, runner, probe, capsys) -> None:
    files = make_cpus(1)
    files[0].unlink()
    files[0].mkdir()

    assert _run(["perform"], cfg, runner, probe) == 3
    err_lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("pwr:")]
    assert len(err_lines) == 1
    assert "CPU governor" in err_lines[0]
    assert not Path(cfg.STATE_FILE).exists()


def test_state_write_failure_exits_4(cfg, tmp_path, runner, probe, capsys) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    cfg = cfg.model_copy(update={"STATE_FILE": str(blocker / "pwr_state")})

    assert _run(["ps"], cfg, runner, probe) == 4
    assert "Could not save profile state" in capsys.readouterr().err


def test_launch_failure_exits_6(cfg, install_all_tools, probe, capsys) -> None:
    from pwr.services.process import ProcessRunner

    # tool passes the probe but is not a valid executable image
    Path(cfg.PRIME_SELECT_PATH).write_bytes(b"\x00\x01not an executable")
    assert main(["perform", "-n"], cfg=cfg, runner=ProcessRunner(timeout=5), probe=probe) == 6
    assert "Could not launch" in capsys.readouterr().err
    assert not Path(cfg.STATE_FILE).exists()


def test_tool_with_undecodable_output_still_commits(cfg, install_all_tools, probe) -> None:
    from pwr.services.process import ProcessRunner

    Path(cfg.PRIME_SELECT_PATH).write_text("#!/bin/sh\nprintf '\\377\\376 switched\\n'\nexit 0\n", encoding="utf-8")
    assert main(["perform", "-n"], cfg=cfg, runner=ProcessRunner(timeout=5), probe=probe) == 0
    assert Path(cfg.STATE_FILE).read_text(encoding="utf-8") == "performance\n"


# ---- scenarios ----

def test_query_on_fresh_machine_prints_performance(cfg, runner, probe, capsys) -> None:
    assert _run(["query"], cfg, runner, probe) == 0
    assert capsys.readouterr().out == "performance\n"
    assert runner.calls == []


def test_perform_without_gpu_tool(cfg, make_cpus, install_tool, runner, probe) -> None:
    files = make_cpus(2, governor="powersave")
    install_tool(cfg.SYSTEMCTL_PATH)
    install_tool(cfg.IWCONFIG_PATH)

    assert _run(["perform"], cfg, runner, probe) == 0
    assert [f.read_text(encoding="utf-8") for f in files] == ["performance\n"] * 2
    assert runner.calls_to("prime-select") == []
    assert Path(cfg.STATE_FILE).read_text(encoding="utf-8") == "performance\n"


def test_powersave_then_toggle(cfg, make_cpus, install_all_tools, runner, probe, capsys) -> None:
    make_cpus(1)
    assert _run(["powersave"], cfg, runner, probe) == 0
    runner.calls.clear()

    assert _run(["toggle"], cfg, runner, probe) == 0
    assert runner.calls_to("prime-select") == [(cfg.PRIME_SELECT_PATH, "nvidia")]
    assert Path(cfg.STATE_FILE).read_text(encoding="utf-8") == "performance\n"

    assert _run(["qu"], cfg, runner, probe) == 0
    assert capsys.readouterr().out == "performance\n"


def test_perform_norestart_never_calls_systemctl(cfg, make_cpus, install_all_tools, runner, probe) -> None:
    make_cpus(1)
    assert _run(["perform", "--norestart"], cfg, runner, probe) == 0
    assert runner.calls_to("systemctl") == []
    assert runner.calls_to("prime-select") != []


def test_no_governor_files_is_not_an_error(cfg, runner, probe) -> None:
    assert _run(["powersave"], cfg, runner, probe) == 0
    assert Path(cfg.STATE_FILE).read_text(encoding="utf-8") == "powersave\n"


def test_parser_uses_configured_program_name() -> None:
    assert build_parser(prog="pwr-test").prog == "pwr-test"

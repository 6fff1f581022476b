"""Tests for the command-line entry point."""
import sys

import pytest

import main as cli


@pytest.fixture
def run(monkeypatch, services):
    """Run ``main()`` with the given arguments against the in-memory services."""
    monkeypatch.setattr(cli, "_services", lambda: services)
    monkeypatch.setattr(cli, "setup_logging", lambda settings: None)

    def _run(*args):
        monkeypatch.setattr(sys, "argv", ["main.py", *args])
        cli.main()
    return _run


def test_seed_start_stop_report(run, services, capsys):
    run("seed")
    assert "Seeded:" in capsys.readouterr().out
    assert services.points.list_points("Lahore")

    run("start-spell", "Lahore")
    assert "started for Lahore" in capsys.readouterr().out
    assert services.spells.get_active_spell("Lahore") is not None

    run("stop-spell", "Lahore")
    assert "stopped for Lahore" in capsys.readouterr().out

    run("report", "Lahore")
    out = capsys.readouterr().out
    assert "WASA LAHORE" in out
    assert "Monsoon Control Room, WASA Head Office Lahore" in out

    run("report", "Lahore", "json")
    assert '"cityName": "Lahore"' in capsys.readouterr().out


def test_business_error_exits_with_code_2(run, capsys):
    with pytest.raises(SystemExit) as exc:
        run("stop-spell", "Multan")
    assert exc.value.code == 2
    assert "No active spell found for Multan." in capsys.readouterr().out


@pytest.mark.parametrize("args", [(), ("start-spell",), ("unknown",)])
def test_usage_errors_exit_with_code_1(run, args):
    with pytest.raises(SystemExit) as exc:
        run(*args)
    assert exc.value.code == 1

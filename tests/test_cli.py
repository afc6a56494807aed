"""Tests for the CLI router and the terminal flow runner."""
from __future__ import annotations

import sys

import pytest

from authn_widget import cli
from authn_widget.commands import run as run_cmd
from authn_widget.errors import TransportError

from .conftest import BASE_URL, FLOW_ID, RESUME, USERNAME_PASSWORD_REQUIRED, FakeTransport


def _main(monkeypatch, *args: str) -> int:
    monkeypatch.setattr(sys, "argv", ["authn-widget", *args])
    try:
        cli.main()
    except SystemExit as e:
        return e.code
    return 0


@pytest.fixture
def fake_transport(monkeypatch):
    """Every widget built during the test talks to this scripted transport."""
    transport = FakeTransport()
    monkeypatch.setattr("authn_widget.widget.FlowTransport", lambda *args, **kwargs: transport)
    return transport


@pytest.fixture
def answers(monkeypatch):
    """Scripted replies for the terminal prompts."""
    replies: list[str] = []

    def ask(prompt, secret=False):
        return replies.pop(0)

    monkeypatch.setattr(run_cmd, "_ask", ask)
    monkeypatch.setenv("AUTHN_FLOW_ID", "")
    return replies


# ─── Router ───


def test_help(monkeypatch, capsys):
    assert _main(monkeypatch, "help") == 0
    assert "authn-widget check" in capsys.readouterr().out


def test_no_arguments_prints_usage(monkeypatch, capsys):
    assert _main(monkeypatch) == 0
    assert "Usage:" in capsys.readouterr().out


def test_unknown_command(monkeypatch, capsys):
    assert _main(monkeypatch, "frobnicate") == 1
    assert "Unknown command: frobnicate" in capsys.readouterr().err


def test_check_needs_a_path(monkeypatch, capsys):
    assert _main(monkeypatch, "check") == 1
    assert "Usage: authn-widget check" in capsys.readouterr().err


def test_check_routes_to_command(monkeypatch, tmp_path, capsys):
    path = tmp_path / "widget.yaml"
    path.write_text("name: plain\n", encoding="utf-8")
    assert _main(monkeypatch, "check", str(path)) == 0
    assert '✓ Widget "plain" compiled' in capsys.readouterr().out


def test_run_parses_arguments(monkeypatch):
    seen: list[tuple] = []
    monkeypatch.setattr(run_cmd, "cmd_run", lambda *args: seen.append(args) or 0)
    monkeypatch.setattr("authn_widget.settings.configure_logging", lambda level: None)

    assert _main(monkeypatch, "run", BASE_URL, "--config", "w.yaml", FLOW_ID) == 0
    assert seen == [(BASE_URL, FLOW_ID, "w.yaml")]


def test_option_without_value(monkeypatch, capsys):
    assert _main(monkeypatch, "run", "--config") == 1
    assert "Missing value for --config" in capsys.readouterr().err


# ─── Terminal runner ───


async def test_run_flow_to_resume(fake_transport, answers, capsys):
    fake_transport.script(USERNAME_PASSWORD_REQUIRED, RESUME)
    answers.extend(["1", "bob", "x", "y", "n"])

    code = await run_cmd.run_flow(BASE_URL, f"https://app.example/login?flowId={FLOW_ID}")

    assert code == 0
    assert fake_transport.calls == [
        ("GET", FLOW_ID, None, None),
        ("POST", FLOW_ID, "checkUsernamePassword", {"username": "bob", "password": "x", "rememberMyUsername": "on"}),
    ]
    assert fake_transport.closed
    out = capsys.readouterr().out
    assert "Sign On" in out
    assert "Flow complete. Resume at: https://example/done" in out


async def test_run_flow_quits_on_empty_choice(fake_transport, answers):
    fake_transport.script(USERNAME_PASSWORD_REQUIRED)
    answers.append("")
    assert await run_cmd.run_flow(BASE_URL, FLOW_ID) == 0
    assert fake_transport.posts == []


async def test_run_flow_reports_transport_failure(fake_transport, answers, capsys):
    fake_transport.script(TransportError("connection refused"))
    assert await run_cmd.run_flow(BASE_URL, FLOW_ID) == 1
    assert "connection refused" in capsys.readouterr().err


async def test_run_flow_needs_base_url(answers, monkeypatch, capsys):
    monkeypatch.setenv("AUTHN_BASE_URL", "")
    assert await run_cmd.run_flow("", FLOW_ID) == 1
    assert "base Url" in capsys.readouterr().err


async def test_run_flow_with_widget_config(fake_transport, answers, tmp_path):
    config = tmp_path / "widget.yaml"
    config.write_text(
        "actions:\n  checkUsernamePassword:\n    required: [username, password]\n    properties: []\n",
        encoding="utf-8",
    )
    fake_transport.script(USERNAME_PASSWORD_REQUIRED, RESUME)
    answers.extend(["checkUsernamePassword", "bob", "x", "n", "y"])

    assert await run_cmd.run_flow(BASE_URL, FLOW_ID, str(config)) == 0
    # empty properties: the whole form is forwarded
    assert fake_transport.posts[0][3] == {"username": "bob", "password": "x", "thisIsMyDevice": "on"}

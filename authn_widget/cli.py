"""Thin CLI router — dispatches to commands."""
from __future__ import annotations

import sys

USAGE = """\
authn-widget — drive PingFederate authentication flows

Usage:
  authn-widget check <config.yaml>                  Parse and validate a widget definition
  authn-widget run [base_url] [flowId|url] [--config <config.yaml>]
                                                    Walk through a flow in the terminal
  authn-widget help                                 Show this message

Environment:
  AUTHN_BASE_URL, AUTHN_FLOW_ID, AUTHN_TIMEOUT_SEC, AUTHN_TEMPLATES_DIR, AUTHN_LOG_LEVEL
"""


def _pop_option(args: list[str], name: str) -> str | None:
    if name not in args:
        return None
    idx = args.index(name)
    if idx + 1 >= len(args):
        print(f"Missing value for {name}", file=sys.stderr)
        sys.exit(1)
    value = args[idx + 1]
    del args[idx:idx + 2]
    return value


def main():
    args = sys.argv[1:]
    command = args[0] if args else None

    if command == "check":
        if len(args) < 2:
            print("Usage: authn-widget check <config.yaml>", file=sys.stderr)
            sys.exit(1)
        from authn_widget.commands.check import cmd_check
        sys.exit(cmd_check(args[1]))

    elif command == "run":
        from authn_widget.commands.run import cmd_run
        from authn_widget.settings import configure_logging, load_settings
        rest = args[1:]
        config_path = _pop_option(rest, "--config")
        configure_logging(load_settings().log_level)
        base_url = rest[0] if rest else ""
        flow = rest[1] if len(rest) > 1 else None
        sys.exit(cmd_run(base_url, flow, config_path))

    elif command in ("help", "--help", "-h", None):
        print(USAGE)

    else:
        print(f"Unknown command: {command}", file=sys.stderr)
        print(USAGE)
        sys.exit(1)

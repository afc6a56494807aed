"""authn-widget run <base_url> [flow] — drive a flow from the terminal."""
from __future__ import annotations

import asyncio
import getpass
import sys
from pathlib import Path

from authn_widget.compiler import parse_widget_yaml
from authn_widget.errors import AuthnWidgetError
from authn_widget.render.mount import HtmlMount
from authn_widget.settings import flow_id_from_query, load_settings
from authn_widget.widget import AuthnWidget

MAX_SCREENS = 50


def _ask(prompt: str, secret: bool = False) -> str:
    return getpass.getpass(prompt) if secret else input(prompt)


def _fill_form(mount: HtmlMount, form_id: str) -> None:
    form = mount.soup.find(id=form_id)
    if form is None:
        return
    for el in form.find_all(["input", "textarea"]):
        name = el.get("name")
        kind = el.get("type", "text")
        if not name or kind in ("hidden", "submit", "button"):
            continue
        if kind == "checkbox":
            answer = _ask(f"  {name} [y/N]: ").strip().lower()
            mount.set_field(name, answer in ("y", "yes"))
        else:
            current = el.get("value", "")
            hint = f" [{current}]" if current and kind != "password" else ""
            value = _ask(f"  {name}{hint}: ", secret=kind == "password")
            mount.set_field(name, value or current)


def _choose_action(actions: list[str]) -> str | None:
    for i, action in enumerate(actions, 1):
        print(f"  {i}. {action}")
    choice = _ask("Select action (empty to quit): ").strip()
    if not choice:
        return None
    if choice in actions:
        return choice
    try:
        idx = int(choice) - 1
    except ValueError:
        return None
    return actions[idx] if 0 <= idx < len(actions) else None


async def run_flow(base_url: str, flow: str | None = None, config_path: str | None = None) -> int:
    settings = load_settings()
    if flow and "flowId=" in flow:
        flow_id = flow_id_from_query(flow)
    else:
        flow_id = flow or settings.flow_id

    registry = None
    definition = None
    if config_path:
        try:
            definition = parse_widget_yaml(Path(config_path).read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            print(f"✗ Widget config: {e}", file=sys.stderr)
            return 1
        registry = definition.build_registry()

    mount = HtmlMount(settings.div_id)
    try:
        widget = AuthnWidget(
            base_url, flow_id=flow_id, settings=settings, mount=mount, registry=registry,
            on_transport_error=lambda e: print(f"✗ {e}", file=sys.stderr),
        )
    except AuthnWidgetError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    if definition is not None:
        definition.apply_templates(widget.renderer)

    try:
        await widget.init()
        for _ in range(MAX_SCREENS):
            if widget.renderer.terminated:
                print(f"Flow complete. Resume at: {widget.renderer.resume_url}")
                return 0
            print()
            print(mount.text())
            actions = mount.bound_actions()
            if not actions:
                print("No actions available on this screen.")
                return 0
            action = _choose_action(actions)
            if action is None:
                return 0
            _fill_form(mount, AuthnWidget.FORM_ID)
            await mount.click(action)
        print("Too many screens, giving up.", file=sys.stderr)
        return 1
    except AuthnWidgetError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    finally:
        await widget.aclose()


def cmd_run(base_url: str, flow: str | None = None, config_path: str | None = None) -> int:
    return asyncio.run(run_flow(base_url, flow, config_path))

"""Mount point for rendered markup and the click wiring on top of it."""
from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Protocol

from bs4 import BeautifulSoup

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    ClickHandler = Callable[[str], Awaitable[Any] | None]

logger = logging.getLogger(__name__)

ACTION_ATTR = "data-actionid"


class Mount(Protocol):
    def replace(self, markup: str) -> None: ...

    def action_elements(self) -> list[str]: ...

    def bind_click(self, action_id: str, handler: ClickHandler) -> None: ...

    def form_fields(self, form_id: str) -> dict[str, str] | None: ...


class HtmlMount:
    """In-memory mount point.

    Markup is kept parsed with BeautifulSoup; ``click(action_id)`` plays the
    part of a user clicking an element flagged with ``data-actionId``.
    Replacing the content drops every bound handler, as replacing innerHTML
    drops the old elements' listeners.
    """

    def __init__(self, mount_id: str = "authnwidget"):
        self.mount_id = mount_id
        self.soup = BeautifulSoup("", "html.parser")
        self._handlers: dict[str, list[ClickHandler]] = {}
        self.renders = 0

    @property
    def markup(self) -> str:
        return str(self.soup)

    def text(self) -> str:
        return self.soup.get_text(" ", strip=True)

    def replace(self, markup: str) -> None:
        self.soup = BeautifulSoup(markup, "html.parser")
        self._handlers = {}
        self.renders += 1

    def action_elements(self) -> list[str]:
        ids: list[str] = []
        for el in self.soup.select(f"[{ACTION_ATTR}]"):
            action_id = el.get(ACTION_ATTR)
            if action_id and action_id not in ids:
                ids.append(action_id)
        return ids

    def bind_click(self, action_id: str, handler: ClickHandler) -> None:
        self._handlers.setdefault(action_id, []).append(handler)

    def bound_actions(self) -> list[str]:
        return list(self._handlers)

    async def click(self, action_id: str) -> list[Any]:
        handlers = self._handlers.get(action_id)
        if not handlers:
            raise LookupError(f'No click handler bound for action "{action_id}"')
        results = []
        for handler in list(handlers):
            result = handler(action_id)
            if inspect.isawaitable(result):
                result = await result
            results.append(result)
        return results

    def set_field(self, name: str, value: str | bool) -> None:
        """Fill in a form control, as a user typing or ticking a box would."""
        el = self.soup.find(attrs={"name": name})
        if el is None:
            raise LookupError(f'No form field named "{name}"')
        if el.name == "textarea":
            el.string = str(value)
        elif el.get("type") in ("checkbox", "radio"):
            if value:
                el["checked"] = "checked"
            elif el.has_attr("checked"):
                del el["checked"]
        else:
            el["value"] = str(value)

    def form_fields(self, form_id: str) -> dict[str, str] | None:
        """Successful controls of ``form_id`` the way a browser's FormData sees them."""
        form = self.soup.find(id=form_id)
        if form is None:
            return None
        data: dict[str, str] = {}
        for el in form.find_all(["input", "select", "textarea"]):
            name = el.get("name")
            if not name or el.has_attr("disabled"):
                continue
            if el.name == "textarea":
                data[name] = el.get_text()
            elif el.name == "select":
                chosen = el.find("option", selected=True) or el.find("option")
                if chosen is not None:
                    data[name] = chosen.get("value", chosen.get_text())
            elif el.get("type") in ("checkbox", "radio"):
                if el.has_attr("checked"):
                    data[name] = el.get("value", "on")
            elif el.get("type") not in ("submit", "button", "image", "reset"):
                data[name] = el.get("value", "")
        return data

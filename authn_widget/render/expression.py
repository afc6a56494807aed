"""Template expression evaluator for the {{expr}} partial syntax.

Supported tags:
  {{expr}}                 HTML-escaped value
  {{{expr}}}               raw value
  {{helper arg ...}}       registered helper (checkedIf, json, ...)
  {{#if expr}}..{{else}}..{{/if}}
  {{#unless expr}}..{{/unless}}
  {{#each expr}}..{{/each}}  ({{this}} and {{@index}} inside the body)

An expr is a path (``a.b``, ``items[0].name``), a quoted string, or ``!expr``.
"""
from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass, field
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

TAG_RE = re.compile(r"\{\{\{(.+?)\}\}\}|\{\{(.+?)\}\}", re.S)

_BLOCKS = ("if", "unless", "each")

HELPERS: dict[str, Callable[..., Any]] = {
    "checkedIf": lambda condition: "checked" if condition else "",
    "selectedIf": lambda condition: "selected" if condition else "",
    "json": lambda value: json.dumps(value),
}


# ─── Expressions ───

# path segments: ``name`` or ``[index]``
_SEGMENT_RE = re.compile(r"\[(\d+)\]|[^.\[\]]+")


def lookup(expr: str, context: Mapping[str, Any]) -> Any:
    """Value of ``expr`` in ``context``.

    ``expr`` is a dotted path with optional list indexes (``_links.self.href``,
    ``devices[0].name``), a quoted string, or ``!expr`` for negation. Any
    missing step yields None.
    """
    expr = expr.strip()
    if not expr:
        return None
    if expr.startswith("!"):
        return not is_truthy(lookup(expr[1:], context))
    if len(expr) > 1 and expr[0] == expr[-1] and expr[0] in "'\"":
        return expr[1:-1]

    value: Any = context
    for m in _SEGMENT_RE.finditer(expr):
        index = m.group(1)
        if index is not None:
            if not isinstance(value, (list, tuple)) or int(index) >= len(value):
                return None
            value = value[int(index)]
        elif isinstance(value, Mapping):
            value = value.get(m.group(0))
        else:
            return None
        if value is None:
            return None
    return value


def is_truthy(value: Any) -> bool:
    # empty lists and mappings are false, as in the partials' {{#if errors}}
    if isinstance(value, (list, tuple, Mapping)):
        return len(value) > 0
    return bool(value)


def _call_or_lookup(expr: str, context: Mapping[str, Any], helpers: dict[str, Callable[..., Any]]) -> Any:
    parts = expr.split()
    if len(parts) > 1 and parts[0] in helpers:
        return helpers[parts[0]](*(lookup(a, context) for a in parts[1:]))
    return lookup(expr, context)


# ─── Template tree ───

@dataclass
class _Text:
    text: str


@dataclass
class _Var:
    expr: str
    escape: bool = True


@dataclass
class _Block:
    kind: str
    expr: str
    body: list = field(default_factory=list)
    alternate: list = field(default_factory=list)


def parse_template(source: str) -> list:
    root: list = []
    stack: list[tuple[_Block, list]] = []
    target = root
    pos = 0

    for m in TAG_RE.finditer(source):
        if m.start() > pos:
            target.append(_Text(source[pos:m.start()]))
        pos = m.end()

        if m.group(1) is not None:
            target.append(_Var(m.group(1).strip(), escape=False))
            continue

        tag = m.group(2).strip()
        if tag.startswith("!"):
            continue  # comment
        if tag.startswith("#"):
            kind, _, expr = tag[1:].partition(" ")
            if kind not in _BLOCKS:
                raise ValueError(f"Unknown block helper: #{kind}")
            block = _Block(kind, expr.strip())
            target.append(block)
            stack.append((block, target))
            target = block.body
        elif tag == "else":
            if not stack:
                raise ValueError("{{else}} outside of a block")
            target = stack[-1][0].alternate
        elif tag.startswith("/"):
            if not stack or stack[-1][0].kind != tag[1:].strip():
                raise ValueError(f"Unexpected closing tag: {{{{{tag}}}}}")
            _, target = stack.pop()
        else:
            target.append(_Var(tag))

    if stack:
        raise ValueError(f"Unclosed block: #{stack[-1][0].kind}")
    if pos < len(source):
        target.append(_Text(source[pos:]))
    return root


def _render_nodes(nodes: list, context: dict[str, Any], helpers: dict[str, Callable[..., Any]]) -> str:
    out: list[str] = []
    for n in nodes:
        if isinstance(n, _Text):
            out.append(n.text)
        elif isinstance(n, _Var):
            val = _call_or_lookup(n.expr, context, helpers)
            text = "" if val is None else str(val)
            out.append(html.escape(text) if n.escape else text)
        elif n.kind == "each":
            items = lookup(n.expr, context)
            if not items:
                out.append(_render_nodes(n.alternate, context, helpers))
                continue
            for i, item in enumerate(items):
                inner = {**context, **item} if isinstance(item, dict) else dict(context)
                inner["this"] = item
                inner["@index"] = i
                out.append(_render_nodes(n.body, inner, helpers))
        else:
            truthy = is_truthy(lookup(n.expr, context))
            if n.kind == "unless":
                truthy = not truthy
            out.append(_render_nodes(n.body if truthy else n.alternate, context, helpers))
    return "".join(out)


class Template:
    """A parsed partial; call it with a data context to get markup."""

    def __init__(self, source: str, name: str = "", helpers: dict[str, Callable[..., Any]] | None = None):
        self.name = name
        self.nodes = parse_template(source)
        self.helpers = {**HELPERS, **(helpers or {})}

    def __call__(self, context: dict[str, Any] | None = None) -> str:
        return _render_nodes(self.nodes, dict(context or {}), self.helpers)


def evaluate_template(template: str, context: dict[str, Any]) -> str:
    return Template(template)(context)

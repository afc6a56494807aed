"""Template lookup for state partials.

By convention a partial is named after the status in lower case
(``username_password_required.html``). Sources are checked in order:
templates registered in memory, then each directory.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from authn_widget.render.expression import Template

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = logging.getLogger(__name__)

PACKAGE_TEMPLATES_DIR = Path(__file__).parent.parent / "templates"
TEMPLATE_SUFFIX = ".html"


class TemplateLoader:
    def __init__(
        self,
        sources: Mapping[str, str] | None = None,
        directories: Iterable[str | Path] | None = None,
        *,
        helpers: dict[str, Callable[..., Any]] | None = None,
    ):
        self._sources = {k.lower(): v for k, v in (sources or {}).items()}
        dirs = [PACKAGE_TEMPLATES_DIR] if directories is None else list(directories)
        self.directories = [Path(d) for d in dirs]
        self.helpers = helpers or {}

    def add(self, key: str, source: str) -> None:
        self._sources[key.lower()] = source

    def resolve(self, key: str) -> Template | None:
        """Compiled template for ``key``, or None when no source matches."""
        key = key.lower()
        source = self._sources.get(key)
        if source is None:
            source = self._read(key)
        if source is None:
            return None
        logger.debug("compiling template %s", key)
        return Template(source, name=key, helpers=self.helpers)

    def keys(self) -> list[str]:
        found = set(self._sources)
        for d in self.directories:
            if d.is_dir():
                found.update(p.stem for p in d.glob(f"*{TEMPLATE_SUFFIX}"))
        return sorted(found)

    def _read(self, key: str) -> str | None:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            return None
        for d in self.directories:
            path = d / f"{key}{TEMPLATE_SUFFIX}"
            if path.is_file():
                return path.read_text(encoding="utf-8")
        return None

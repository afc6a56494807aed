"""Runtime configuration from the environment (and a local .env file)."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from urllib.parse import parse_qs, urlsplit

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    base_url: str = ""
    flow_id: str = ""
    div_id: str = "authnwidget"
    timeout_sec: float = 10.0
    templates_dir: str = ""
    log_level: str = "WARNING"


def load_settings(env_file: str | None = None) -> Settings:
    load_dotenv(env_file)
    return Settings(
        base_url=os.getenv("AUTHN_BASE_URL", ""),
        flow_id=os.getenv("AUTHN_FLOW_ID", ""),
        div_id=os.getenv("AUTHN_DIV_ID", "authnwidget"),
        timeout_sec=float(os.getenv("AUTHN_TIMEOUT_SEC", "10")),
        templates_dir=os.getenv("AUTHN_TEMPLATES_DIR", ""),
        log_level=os.getenv("AUTHN_LOG_LEVEL", "WARNING").upper(),
    )


def flow_id_from_query(value: str | None) -> str:
    """``flowId`` from a page URL or a bare query string; '' when absent."""
    if not value:
        return ""
    query = urlsplit(value).query if ("://" in value or value.startswith("/")) else value.lstrip("?")
    return parse_qs(query).get("flowId", [""])[0]


def configure_logging(level: str | int = "WARNING") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)

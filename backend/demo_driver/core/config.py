# backend/demo_driver/core/config.py
from __future__ import annotations
import os
from functools import lru_cache
from typing import List, Mapping, Optional
from urllib.parse import parse_qs, parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(value: Optional[str], default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


def _parse_cors_origins(env_val: str | None) -> List[str]:
    if not env_val:
        return ["*"]
    items = [o.strip() for o in env_val.split(",")]
    # filter out empty strings
    items = [o for o in items if o]
    return items or ["*"]


def url_requests_demo(url: str) -> bool:
    """True when the visualizer URL carries the ``demo=1`` query flag."""
    query = parse_qs(urlsplit(url).query)
    return "1" in query.get("demo", [])


def strip_demo_flag(url: str) -> str:
    """Drop the ``demo`` query parameter, keeping the rest of the URL intact."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "demo"]
    return urlunsplit(parts._replace(query=urlencode(query)))


class DemoSettings(BaseModel):
    visualizer_url: str = "http://localhost:8080/"
    auto_demo: bool = False
    headless: bool = True
    ready_timeout: float = Field(default=10.0, gt=0)
    auto_run_delay: float = Field(default=0.3, ge=0)
    settle_expression: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DemoSettings":
        """
        Read settings once from the environment.

        The auto-run flag is on when AUTO_DEMO is truthy, or when the
        visualizer URL itself asks for it with ``?demo=1``.
        """
        env = os.environ if environ is None else environ
        url = env.get("VISUALIZER_URL") or cls.model_fields["visualizer_url"].default

        data = {
            "visualizer_url": url,
            "auto_demo": _env_flag(env.get("AUTO_DEMO")) or url_requests_demo(url),
            "headless": _env_flag(env.get("HEADLESS"), default=True),
            "cors_origins": _parse_cors_origins(env.get("CORS_ORIGINS")),
            "log_level": (env.get("LOG_LEVEL") or "INFO").upper(),
        }
        if env.get("READY_TIMEOUT"):
            data["ready_timeout"] = float(env["READY_TIMEOUT"])
        if env.get("AUTO_RUN_DELAY"):
            data["auto_run_delay"] = float(env["AUTO_RUN_DELAY"])
        if env.get("SETTLE_EXPRESSION"):
            data["settle_expression"] = env["SETTLE_EXPRESSION"]
        return cls(**data)


@lru_cache(maxsize=1)
def get_settings() -> DemoSettings:
    return DemoSettings.from_env()

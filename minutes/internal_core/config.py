from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _project_root() -> Path:
    # minutes/internal_core/config.py -> minutes -> repo root
    return Path(__file__).resolve().parents[2]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


@dataclass(frozen=True)
class EditorConfig:
    MINUTES_STORAGE_BACKEND: str
    MINUTES_STORAGE_PATH: str
    MINUTES_REANALYZE_DELAY_MS: int
    MINUTES_ANCHOR_OFFSET_PX: int
    MINUTES_HEADING_FONT_SIZE: str
    MINUTES_BODY_FONT_SIZE: str
    MINUTES_SESSION_TTL_SECONDS: int
    MINUTES_AUDIT_MAX_EVENTS: int
    MINUTES_LOG_LEVEL: str
    MINUTES_CORS_ENABLED: bool

    def storage_path(self, repo_root: Path | None = None) -> Path:
        root = repo_root if repo_root is not None else _project_root()
        return (root / self.MINUTES_STORAGE_PATH).resolve()


def load_config() -> EditorConfig:
    return EditorConfig(
        MINUTES_STORAGE_BACKEND=_getenv_str("MINUTES_STORAGE_BACKEND", "json_file"),
        MINUTES_STORAGE_PATH=_getenv_str("MINUTES_STORAGE_PATH", "./tmp/minutes_store.json"),
        MINUTES_REANALYZE_DELAY_MS=_getenv_int("MINUTES_REANALYZE_DELAY_MS", 50),
        MINUTES_ANCHOR_OFFSET_PX=_getenv_int("MINUTES_ANCHOR_OFFSET_PX", 5),
        MINUTES_HEADING_FONT_SIZE=_getenv_str("MINUTES_HEADING_FONT_SIZE", "12pt"),
        MINUTES_BODY_FONT_SIZE=_getenv_str("MINUTES_BODY_FONT_SIZE", "11pt"),
        MINUTES_SESSION_TTL_SECONDS=_getenv_int("MINUTES_SESSION_TTL_SECONDS", 14400),
        MINUTES_AUDIT_MAX_EVENTS=_getenv_int("MINUTES_AUDIT_MAX_EVENTS", 500),
        MINUTES_LOG_LEVEL=_getenv_str("MINUTES_LOG_LEVEL", "INFO"),
        MINUTES_CORS_ENABLED=_getenv_bool("MINUTES_CORS_ENABLED", True),
    )

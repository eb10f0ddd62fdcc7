"""Environment-driven settings. Values are read once, at application start."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from services.errors import ConfigError

STORE_BACKENDS = ("memory", "sqlite")


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_float(name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _env_int(name: str, default: int, *, minimum: int = 0) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    storage_path: Path = Path("uploads")
    store_backend: str = "memory"           # memory | sqlite
    database_path: Path | None = None       # defaults to {storage_path}/clipmosaic.sqlite3
    clip_catalog_path: Path | None = None   # optional JSON seed for the clip catalog
    candidate_limit: int = 8
    max_duration_seconds: float = 120.0
    render_delay_seconds: float = 5.0
    cleanup_delay_seconds: float = 300.0
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3001

    def __post_init__(self) -> None:
        if self.store_backend not in STORE_BACKENDS:
            raise ConfigError(f"STORE_BACKEND must be one of {list(STORE_BACKENDS)}, got {self.store_backend!r}")

    @property
    def resolved_database_path(self) -> Path:
        return self.database_path or self.storage_path / "clipmosaic.sqlite3"

    @property
    def generated_dir(self) -> Path:
        return self.storage_path / "generated"

    @classmethod
    def from_env(cls) -> "Settings":
        database_path = _env("DATABASE_PATH")
        catalog_path = _env("CLIP_CATALOG_PATH")
        origins = [o.strip() for o in _env("CORS_ORIGINS", "*").split(",") if o.strip()]
        return cls(
            storage_path=Path(_env("STORAGE_PATH", "uploads")),
            store_backend=_env("STORE_BACKEND", "memory").lower(),
            database_path=Path(database_path) if database_path else None,
            clip_catalog_path=Path(catalog_path) if catalog_path else None,
            candidate_limit=_env_int("CANDIDATE_LIMIT", 8, minimum=1),
            max_duration_seconds=_env_float("MAX_DURATION_SECONDS", 120.0, minimum=1.0),
            render_delay_seconds=_env_float("RENDER_DELAY_SECONDS", 5.0),
            cleanup_delay_seconds=_env_float("CLEANUP_DELAY_SECONDS", 300.0),
            cors_origins=origins or ["*"],
            log_level=_env("LOG_LEVEL", "INFO").upper(),
            host=_env("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3001, minimum=1),
        )

"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

# Search order: explicit argument, $PREDPOOL_CONFIG_DIR, ./config, repo config
_REPO_CONFIG = Path(__file__).resolve().parent.parent.parent.parent / "config"
_ENV_VAR = "PREDPOOL_CONFIG_DIR"
_SECTIONS = ("pricing", "liquidity", "storage", "logging")


def _read_layer(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("rb") as f:
        return tomllib.load(f)


def _merge(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Nested tables merge key by key; scalars in layer replace base."""
    merged = dict(base)
    for key, value in layer.items():
        current = merged.get(key)
        merged[key] = _merge(current, value) if isinstance(current, dict) and isinstance(value, dict) else value
    return merged


def resolve_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return Path(config_dir)
    env = os.environ.get(_ENV_VAR)
    if env:
        return Path(env)
    cwd = Path.cwd() / "config"
    return cwd if cwd.is_dir() else _REPO_CONFIG


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """default.toml with <profile>.toml layered on top. Missing files contribute nothing."""
    root = resolve_config_dir(config_dir)
    layers = [root / "default.toml"]
    if profile:
        layers.append(root / f"{profile}.toml")
    raw: dict[str, Any] = {}
    for path in layers:
        raw = _merge(raw, _read_layer(path))
    return raw


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    settings = Settings.from_dict(load_config(profile, config_dir))
    settings.validate()
    return settings


class Settings:
    """Pricing, liquidity, storage and logging sections with typed accessors."""

    def __init__(self, **sections: dict[str, Any] | None) -> None:
        unknown = set(sections) - set(_SECTIONS)
        if unknown:
            raise TypeError(f"unknown config sections: {sorted(unknown)}")
        self.pricing = sections.get("pricing") or {}
        self.liquidity = sections.get("liquidity") or {}
        self.storage = sections.get("storage") or {}
        self.logging = sections.get("logging") or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(**{name: raw.get(name) for name in _SECTIONS})

    def validate(self) -> None:
        """Reject fee values outside [0, max_fee_bps] and non-positive precision."""
        if self.precision <= 0:
            raise ValueError(f"pricing.precision must be positive, got {self.precision}")
        for name in ("platform_fee_bps", "early_exit_fee_bps"):
            value = getattr(self, name)
            if not 0 <= value <= self.max_fee_bps:
                raise ValueError(f"pricing.{name}={value} outside [0, {self.max_fee_bps}]")

    # [pricing]
    @property
    def precision(self) -> int:
        return int(self.pricing.get("precision", 10000))

    @property
    def platform_fee_bps(self) -> int:
        return int(self.pricing.get("platform_fee_bps", 300))

    @property
    def early_exit_fee_bps(self) -> int:
        return int(self.pricing.get("early_exit_fee_bps", 300))

    @property
    def max_fee_bps(self) -> int:
        return int(self.pricing.get("max_fee_bps", 1000))

    # [liquidity]
    @property
    def default_liquidity_enabled(self) -> bool:
        return bool(self.liquidity.get("default_enabled", False))

    @property
    def default_liquidity_amount(self) -> int:
        return int(self.liquidity.get("default_amount", 0))

    @property
    def house_provider(self) -> str:
        return str(self.liquidity.get("house_provider", "house"))

    # [storage]
    @property
    def db_path(self) -> str:
        return self.storage.get("db_path", "data/predpool.duckdb")

    @property
    def persist(self) -> bool:
        return bool(self.storage.get("persist", True))

    # [logging]
    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return logging.getLevelNamesMapping().get(self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog once at process entry (CLI callback or service start)."""
    import structlog

    shared = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        renderer = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=shared + renderer,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

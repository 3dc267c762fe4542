"""Unified configuration loaded from .vitrine.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field
from vitrine.content.auth import DEFAULT_PASSWORD
from vitrine.persistence.scheduler import (
    DEFAULT_DEBOUNCE_SECONDS,
    DEFAULT_SAVED_DISPLAY_SECONDS,
    DEFAULT_SAVING_DELAY_SECONDS,
)
from vitrine.persistence.storage import DEFAULT_QUOTA_BYTES

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".vitrine.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "vitrine" / "config.toml"


class StorageSectionConfig(BaseModel):
    """[storage] section."""

    directory: str = "./.vitrine"
    quota_bytes: int | None = DEFAULT_QUOTA_BYTES


class PersistenceSectionConfig(BaseModel):
    """[persistence] section: save scheduler timings, in seconds."""

    debounce_seconds: float = Field(default=DEFAULT_DEBOUNCE_SECONDS, ge=0)
    saving_delay_seconds: float = Field(default=DEFAULT_SAVING_DELAY_SECONDS, ge=0)
    saved_display_seconds: float = Field(default=DEFAULT_SAVED_DISPLAY_SECONDS, ge=0)


class AuthSectionConfig(BaseModel):
    """[auth] section.

    ``password_sha256`` (hex digest) wins over ``password`` when set.
    """

    password: str = DEFAULT_PASSWORD
    password_sha256: str = ""


class TransferSectionConfig(BaseModel):
    """[transfer] section."""

    strict: bool = False


class CheckoutSectionConfig(BaseModel):
    """[checkout] section."""

    destination: str = ""
    brand: str = "H&R GRIFES"

    @property
    def is_configured(self) -> bool:
        return bool(self.destination.strip())


class VitrineConfig(BaseModel):
    """Top-level configuration for the site store."""

    storage: StorageSectionConfig = Field(default_factory=StorageSectionConfig)
    persistence: PersistenceSectionConfig = Field(default_factory=PersistenceSectionConfig)
    auth: AuthSectionConfig = Field(default_factory=AuthSectionConfig)
    transfer: TransferSectionConfig = Field(default_factory=TransferSectionConfig)
    checkout: CheckoutSectionConfig = Field(default_factory=CheckoutSectionConfig)

    @property
    def storage_path(self) -> Path:
        return Path(self.storage.directory).expanduser()


def load_config(path: str | Path | None = None) -> VitrineConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .vitrine.toml in CWD
    3. ~/.config/vitrine/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = VitrineConfig.model_validate(data) if data else VitrineConfig()

    return _apply_env_vars(config)


def merge_cli_overrides(config: VitrineConfig, **cli_kwargs: object) -> VitrineConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "storage_dir": ("storage", "directory"),
        "password": ("auth", "password"),
        "strict": ("transfer", "strict"),
        "destination": ("checkout", "destination"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value

    return VitrineConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: VitrineConfig) -> VitrineConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "VITRINE_STORAGE_DIR": ("storage", "directory"),
        "VITRINE_ADMIN_PASSWORD": ("auth", "password"),
        "VITRINE_ADMIN_PASSWORD_SHA256": ("auth", "password_sha256"),
        "VITRINE_CHECKOUT_DESTINATION": ("checkout", "destination"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    strict_raw = os.environ.get("VITRINE_STRICT_IMPORT")
    if strict_raw is not None:
        data["transfer"]["strict"] = strict_raw.lower() in ("true", "1", "yes")

    return VitrineConfig.model_validate(data)

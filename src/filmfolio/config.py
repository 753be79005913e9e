"""Unified configuration loaded from .filmfolio.toml, stored credentials and env vars.

Loading order: defaults → TOML file → client-local credentials → env vars.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

from filmfolio.credentials import CredentialStore
from filmfolio.integrations.jsonbin import JsonBinConfig
from filmfolio.integrations.supabase import SupabaseConfig
from filmfolio.shared.images import DEFAULT_MAX_DIMENSION, DEFAULT_QUALITY

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".filmfolio.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "filmfolio" / "config.toml"


class StorageConfig(BaseModel):
    """[storage] section.

    ``backend = "auto"`` picks Supabase, then JSONbin, whichever has
    credentials; with neither the site runs unconfigured.
    """

    backend: Literal["auto", "local", "jsonbin", "supabase"] = "auto"


class LocalConfig(BaseModel):
    """[local] section."""

    data_dir: str = "./portfolio-data"
    max_document_bytes: int | None = 5_000_000


class ImageSettings(BaseModel):
    """[images] section."""

    mode: Literal["auto", "embed", "remote"] = "auto"
    max_dimension: int = Field(DEFAULT_MAX_DIMENSION, gt=0)
    quality: float = Field(DEFAULT_QUALITY, gt=0, le=1)


class AdminConfig(BaseModel):
    """[admin] section.

    An empty passphrase keeps the admin API locked.
    """

    passphrase: str = ""


class ServerConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int = 8000


class FilmfolioConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    local: LocalConfig = Field(default_factory=LocalConfig)
    jsonbin: JsonBinConfig = Field(default_factory=JsonBinConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    images: ImageSettings = Field(default_factory=ImageSettings)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)


def load_config(
    path: str | Path | None = None,
    *,
    credentials: CredentialStore | None = None,
) -> FilmfolioConfig:
    """Load configuration from a TOML file, stored credentials and env vars.

    Search order for the TOML file:
    1. Explicit path (if provided)
    2. .filmfolio.toml in CWD
    3. ~/.config/filmfolio/config.toml

    Args:
        path: Explicit path to a TOML file.
        credentials: Credential store to overlay; defaults to the
            per-user credentials file.

    Returns:
        Merged FilmfolioConfig.

    Raises:
        ValidationError: If the TOML file holds invalid values. Invalid
            environment overrides are logged and skipped instead.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG_PATH):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = FilmfolioConfig.model_validate(data) if data else FilmfolioConfig()
    config = _apply_credentials(config, credentials or CredentialStore())
    return _apply_env_vars(config)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_credentials(config: FilmfolioConfig, store: CredentialStore) -> FilmfolioConfig:
    """Overlay JSONbin credentials saved from the admin surface."""
    stored = store.load()
    if stored.is_empty:
        return config
    data = config.model_dump()
    if stored.bin_id:
        data["jsonbin"]["bin_id"] = stored.bin_id
    if stored.api_key:
        data["jsonbin"]["api_key"] = stored.api_key
    return FilmfolioConfig.model_validate(data)


def _apply_env_vars(config: FilmfolioConfig) -> FilmfolioConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FILMFOLIO_BACKEND": ("storage", "backend"),
        "FILMFOLIO_DATA_DIR": ("local", "data_dir"),
        "JSONBIN_BIN_ID": ("jsonbin", "bin_id"),
        "JSONBIN_API_KEY": ("jsonbin", "api_key"),
        "SUPABASE_URL": ("supabase", "url"),
        "SUPABASE_ANON_KEY": ("supabase", "anon_key"),
        "SUPABASE_BUCKET": ("supabase", "bucket"),
        "FILMFOLIO_IMAGE_MODE": ("images", "mode"),
        "FILMFOLIO_ADMIN_PASSPHRASE": ("admin", "passphrase"),
        "FILMFOLIO_HOST": ("server", "host"),
        "FILMFOLIO_PORT": ("server", "port"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is None:
            continue
        candidate = {**data, section: {**data[section], field: value}}
        try:
            FilmfolioConfig.model_validate(candidate)
        except ValidationError:
            logger.warning("Ignoring %s: not a valid value for %s.%s", env_var, section, field)
            continue
        data = candidate

    return FilmfolioConfig.model_validate(data)

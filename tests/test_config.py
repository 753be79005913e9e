"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from filmfolio.config import FilmfolioConfig, load_config
from filmfolio.credentials import CredentialStore, StoredCredentials

_ENV_VARS = [
    "FILMFOLIO_BACKEND",
    "FILMFOLIO_DATA_DIR",
    "JSONBIN_BIN_ID",
    "JSONBIN_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_ANON_KEY",
    "SUPABASE_BUCKET",
    "FILMFOLIO_IMAGE_MODE",
    "FILMFOLIO_ADMIN_PASSPHRASE",
    "FILMFOLIO_HOST",
    "FILMFOLIO_PORT",
]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path: Path) -> CredentialStore:
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr("filmfolio.config.GLOBAL_CONFIG_PATH", tmp_path / "global.toml")
    monkeypatch.chdir(tmp_path)
    return CredentialStore(tmp_path / "credentials.json")


class TestDefaults:
    def test_defaults(self):
        config = FilmfolioConfig()
        assert config.storage.backend == "auto"
        assert config.images.mode == "auto"
        assert config.images.max_dimension == 1000
        assert config.images.quality == 0.6
        assert config.admin.passphrase == ""
        assert config.jsonbin.is_configured is False
        assert config.supabase.is_configured is False

    def test_quality_bounds(self):
        with pytest.raises(ValidationError):
            FilmfolioConfig.model_validate({"images": {"quality": 1.5}})

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            FilmfolioConfig.model_validate({"storage": {"backend": "s3"}})


class TestLoadConfig:
    def test_no_file(self, clean_env, tmp_path: Path):
        config = load_config(credentials=clean_env)
        assert config == FilmfolioConfig()

    def test_explicit_toml(self, clean_env, tmp_path: Path):
        path = tmp_path / "site.toml"
        path.write_text(
            '[storage]\nbackend = "local"\n\n[local]\ndata_dir = "/srv/portfolio"\n\n'
            '[admin]\npassphrase = "1228"\n',
            encoding="utf-8",
        )
        config = load_config(path, credentials=clean_env)
        assert config.storage.backend == "local"
        assert config.local.data_dir == "/srv/portfolio"
        assert config.admin.passphrase == "1228"

    def test_toml_in_cwd(self, clean_env, tmp_path: Path):
        (tmp_path / ".filmfolio.toml").write_text('[server]\nport = 9000\n', encoding="utf-8")
        assert load_config(credentials=clean_env).server.port == 9000

    def test_missing_explicit_file(self, clean_env, tmp_path: Path):
        assert load_config(tmp_path / "nope.toml", credentials=clean_env) == FilmfolioConfig()

    def test_invalid_toml_is_ignored(self, clean_env, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[storage\n", encoding="utf-8")
        assert load_config(path, credentials=clean_env) == FilmfolioConfig()

    def test_stored_credentials(self, clean_env):
        clean_env.save(StoredCredentials(bin_id="bin123", api_key="key"))
        config = load_config(credentials=clean_env)
        assert config.jsonbin.bin_id == "bin123"
        assert config.jsonbin.is_configured is True

    def test_env_overrides(self, clean_env, monkeypatch):
        clean_env.save(StoredCredentials(bin_id="stored", api_key="stored-key"))
        monkeypatch.setenv("JSONBIN_BIN_ID", "from-env")
        monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
        monkeypatch.setenv("SUPABASE_ANON_KEY", "anon")
        monkeypatch.setenv("FILMFOLIO_IMAGE_MODE", "embed")
        monkeypatch.setenv("FILMFOLIO_PORT", "8123")

        config = load_config(credentials=clean_env)
        assert config.jsonbin.bin_id == "from-env"
        assert config.jsonbin.api_key == "stored-key"
        assert config.supabase.is_configured is True
        assert config.images.mode == "embed"
        assert config.server.port == 8123


class TestInvalidValues:
    def test_bad_port_is_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv("FILMFOLIO_PORT", "eighty")
        monkeypatch.setenv("FILMFOLIO_HOST", "0.0.0.0")
        config = load_config(credentials=clean_env)
        assert config.server.port == 8000
        assert config.server.host == "0.0.0.0"

    def test_unknown_backend_is_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv("FILMFOLIO_BACKEND", "postgres")
        assert load_config(credentials=clean_env).storage.backend == "auto"

    def test_env_still_overrides_toml_value(self, clean_env, monkeypatch, tmp_path: Path):
        (tmp_path / ".filmfolio.toml").write_text('[storage]\nbackend = "local"\n', encoding="utf-8")
        monkeypatch.setenv("FILMFOLIO_BACKEND", "postgres")
        assert load_config(credentials=clean_env).storage.backend == "local"

    def test_invalid_toml_value_raises(self, clean_env, tmp_path: Path):
        path = tmp_path / "site.toml"
        path.write_text('[images]\nmode = "sideways"\n', encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(path, credentials=clean_env)

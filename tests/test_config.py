"""Config loading and profile overlay."""

import pytest

from predpool.config import Settings, get_settings, load_config
from predpool.models import ProtocolParameters


def test_profile_overlay_merges(tmp_path):
    (tmp_path / "default.toml").write_text(
        '[pricing]\nplatform_fee_bps = 300\nearly_exit_fee_bps = 300\n\n'
        '[storage]\ndb_path = "data/a.duckdb"\npersist = true\n'
    )
    (tmp_path / "dev.toml").write_text('[pricing]\nplatform_fee_bps = 100\n\n[logging]\nlevel = "debug"\n')

    raw = load_config("dev", tmp_path)
    assert raw["pricing"] == {"platform_fee_bps": 100, "early_exit_fee_bps": 300}

    settings = get_settings("dev", tmp_path)
    assert settings.platform_fee_bps == 100
    assert settings.db_path == "data/a.duckdb"
    assert settings.logging_level == "DEBUG"
    # Unknown profile falls back to defaults
    assert get_settings("prod", tmp_path).platform_fee_bps == 300


def test_missing_config_dir_gives_defaults(tmp_path):
    assert load_config(None, tmp_path) == {}
    settings = get_settings(None, tmp_path)
    assert settings.precision == 10000
    assert settings.max_fee_bps == 1000
    assert settings.persist is True
    assert settings.logging_format == "console"


def test_parameters_from_settings():
    settings = Settings(
        pricing={"platform_fee_bps": 250, "early_exit_fee_bps": 150},
        liquidity={"default_enabled": True, "default_amount": 1000, "house_provider": "treasury"},
    )
    params = ProtocolParameters.from_settings(settings)
    assert (params.platform_fee, params.early_exit_fee, params.max_fee) == (250, 150, 1000)
    assert params.default_liquidity_enabled
    assert params.default_liquidity_amount == 1000
    assert params.house_provider == "treasury"
    assert not params.paused


def test_fee_outside_cap_rejected(tmp_path):
    (tmp_path / "default.toml").write_text("[pricing]\nplatform_fee_bps = 1500\n")
    with pytest.raises(ValueError):
        get_settings(None, tmp_path)


def test_env_var_selects_config_dir(tmp_path, monkeypatch):
    (tmp_path / "default.toml").write_text('[storage]\ndb_path = "elsewhere.duckdb"\n')
    monkeypatch.setenv("PREDPOOL_CONFIG_DIR", str(tmp_path))
    assert get_settings().db_path == "elsewhere.duckdb"


def test_unknown_section_rejected():
    with pytest.raises(TypeError):
        Settings(ingestion={})

from pathlib import Path

import pytest

from geomarcos.config import get_settings, reset_settings

_ENV_KEYS = (
    "GEOMARCOS_CONFIG_FILE",
    "GEOMARCOS_DATA_DIR",
    "GEOMARCOS_LOG_DIR",
    "GEOMARCOS_DATABASE_URL",
    "GEOMARCOS_UTM_ZONE",
    "GEOMARCOS_UTM_SOUTH",
    "GEOMARCOS_SOURCE_EPSG",
    "GEOMARCOS_OPERATOR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


def test_defaults() -> None:
    settings = get_settings()
    assert settings.utm_zone == 22
    assert settings.utm_south is True
    assert settings.utm_bounds.epsg == 31982
    assert settings.source_epsg == 4674
    assert settings.operator == "SYSTEM-AUTO"
    assert settings.database_url.startswith("sqlite:///")
    assert settings.log_dir == settings.data_dir / "logs"


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()
    assert get_settings(refresh=True) is not None


def test_toml_file(tmp_path: Path) -> None:
    config = tmp_path / "geomarcos.toml"
    config.write_text(
        '[paths]\ndata = "dados"\n\n[grid]\nutm_zone = 23\n\n[correction]\noperator = "ana"\n',
        encoding="utf-8",
    )
    settings = get_settings(config_file=config)
    assert settings.utm_zone == 23
    assert settings.utm_bounds.epsg == 31983
    assert settings.operator == "ana"
    assert settings.data_dir == (tmp_path / "dados").resolve()


def test_yaml_file_and_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "geomarcos.yaml"
    config.write_text("database:\n  url: sqlite:///from-file.db\ncorrection:\n  operator: ana\n", encoding="utf-8")
    monkeypatch.setenv("GEOMARCOS_CONFIG_FILE", str(config))
    monkeypatch.setenv("GEOMARCOS_OPERATOR", "bruno")
    settings = get_settings()
    assert settings.database_url == "sqlite:///from-file.db"
    assert settings.operator == "bruno"


def test_invalid_values(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GEOMARCOS_UTM_SOUTH", "maybe")
    with pytest.raises(ValueError):
        get_settings(refresh=True)
    monkeypatch.setenv("GEOMARCOS_UTM_SOUTH", "false")
    monkeypatch.setenv("GEOMARCOS_UTM_ZONE", "99")
    with pytest.raises(ValueError):
        get_settings(refresh=True)


def test_unsupported_and_missing_files(tmp_path: Path) -> None:
    bad = tmp_path / "settings.ini"
    bad.write_text("[x]\n", encoding="utf-8")
    with pytest.raises(ValueError):
        get_settings(config_file=bad)
    with pytest.raises(FileNotFoundError):
        get_settings(config_file=tmp_path / "missing.toml")

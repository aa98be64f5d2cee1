from pathlib import Path

import pytest

from onvif_device_client.config import (
    CONFIG_VERSION,
    MIN_SUPPORTED_CONFIG_VERSION,
    Config,
)


def test_default_config_passes_validation() -> None:
    config = Config()
    assert config.config_version == CONFIG_VERSION
    assert config.xaddr is None


@pytest.mark.parametrize(
    "field,value,error",
    [
        ("timeout", 0.0, "timeout"),
        ("output", "xml", "output"),
        ("log_format", "pretty", "log_format"),
        ("log_level", "LOUD", "log_level"),
        ("xaddr", "camera.local", "xaddr"),
    ],
)
def test_bounds_enforced(field: str, value: object, error: str) -> None:
    with pytest.raises(ValueError, match=error):
        Config(**{field: value})


def test_future_config_version_rejected() -> None:
    with pytest.raises(ValueError, match="newer than supported"):
        Config(config_version=CONFIG_VERSION + 1)


def test_ancient_config_version_rejected() -> None:
    with pytest.raises(ValueError, match="too old"):
        Config(config_version=MIN_SUPPORTED_CONFIG_VERSION - 1)


def test_sources_apply_in_order(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "client.toml"
    config_file.write_text(
        'xaddr = "http://file/onvif"\ntimeout = 3\nlog-level = "info"\n', encoding="utf-8"
    )
    monkeypatch.setenv("ONVIF_DEVICE_TIMEOUT", "7.5")
    monkeypatch.setenv("ONVIF_DEVICE_OUTPUT", "YAML")

    config = Config.from_sources({"output": "table", "log_level": None}, config_file)

    assert config.xaddr == "http://file/onvif"
    assert config.timeout == 7.5
    assert config.output == "table"
    assert config.log_level == "INFO"


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "client.toml"
    config_file.write_text('xaddr = "https://env/onvif"\n', encoding="utf-8")
    monkeypatch.setenv("ONVIF_DEVICE_CONFIG", str(config_file))

    assert Config.from_sources().xaddr == "https://env/onvif"


def test_missing_config_file_rejected(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        Config.from_sources(config_path=tmp_path / "absent.toml")


def test_logging_dict_lists_settings() -> None:
    logged = Config(xaddr="http://camera/onvif").logging_dict()
    assert logged["xaddr"] == "http://camera/onvif"
    assert logged["timeout"] == 5.0

from pathlib import Path

from cadence.application.config import AppConfig, resolve_config


def test_defaults(mock_home: Path):
    config = resolve_config()

    assert config.data_dir == mock_home / ".local/share/cadence"
    assert config.records_path == mock_home / ".local/share/cadence/records.json"
    assert config.catalog_path == mock_home / ".local/share/cadence/catalog.yaml"
    assert config.port == 8777


def test_overrides_ignore_none(mock_home: Path, tmp_path: Path):
    config = resolve_config({"data_dir": tmp_path, "port": None})

    assert config.data_dir == tmp_path
    assert config.port == 8777


def test_absolute_file_paths_are_kept(mock_home: Path, tmp_path: Path):
    target = tmp_path / "elsewhere.json"
    config = AppConfig(records_file=target)
    assert config.records_path == target


def test_env_vars(mock_home: Path, tmp_path: Path, monkeypatch):
    monkeypatch.setenv("CADENCE_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CADENCE_PORT", "9001")

    config = resolve_config()
    assert config.data_dir == tmp_path
    assert config.port == 9001


def test_toml_file_has_lowest_priority(mock_home: Path, tmp_path: Path, monkeypatch):
    cfg = mock_home / ".config/cadence/config.toml"
    cfg.parent.mkdir(parents=True)
    cfg.write_text('port = 9100\nhost = "0.0.0.0"\n', encoding="utf-8")
    monkeypatch.setenv("CADENCE_PORT", "9200")

    config = resolve_config()
    assert config.host == "0.0.0.0"
    assert config.port == 9200

    assert resolve_config({"port": 9300}).port == 9300

import pytest

from marketlens.config import DEFAULT_CONFIG, load_config
from marketlens.config.loader import merge_config


def test_defaults_without_file():
    config = load_config()
    assert config == DEFAULT_CONFIG
    assert config is not DEFAULT_CONFIG
    assert config["charts"]["attempts"] == 3
    assert config["pdf"]["margin"] == 50


def test_user_file_merges_per_section(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "charts:\n"
        "  provider: matplotlib\n"
        "pdf:\n"
        "  page_size: letter\n"
        "output_dir: reports\n"
    )
    config = load_config(str(path))
    assert config["charts"]["provider"] == "matplotlib"
    assert config["charts"]["attempts"] == 3
    assert config["pdf"]["page_size"] == "letter"
    assert config["pdf"]["margin"] == 50
    assert config["output_dir"] == "reports"


def test_merge_does_not_mutate_defaults():
    merge_config({"charts": {"attempts": 9}})
    assert DEFAULT_CONFIG["charts"]["attempts"] == 3


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_yaml_raises(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ValueError):
        load_config(str(path))

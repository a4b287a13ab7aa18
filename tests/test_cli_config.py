"""Tests for configuration file overrides."""

from types import SimpleNamespace

import pytest

from constants import Constants
from cli_config import apply_cli_overrides, apply_config, load_config


@pytest.fixture
def restore_constants():
    names = ["SOURCE_MARKETPLACE_URL", "MIRROR_MARKETPLACE_URL", "UNMAINTAINED_DAYS", "PUBLISH_COMMAND",
             "WORK_DIRS"]
    saved = {name: getattr(Constants, name) for name in names}
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


class TestLoadConfig:
    """Test reading config files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "mirrorsync.yml"
        path.write_text("mirror:\n  url: https://mirror.test/gallery\n", encoding="utf-8")
        assert load_config(str(path)) == {"mirror": {"url": "https://mirror.test/gallery"}}

    def test_json(self, tmp_path):
        path = tmp_path / "mirrorsync.json"
        path.write_text('{"sync": {"unmaintained_days": 30}}', encoding="utf-8")
        assert load_config(str(path)) == {"sync": {"unmaintained_days": 30}}

    def test_missing(self, tmp_path):
        assert load_config(str(tmp_path / "none.yml")) == {}
        assert load_config(None) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("a: [unclosed", encoding="utf-8")
        assert load_config(str(path)) == {}


class TestApplyConfig:
    """Test overrides land on Constants."""

    def test_known_keys(self, restore_constants):
        apply_config({
            "mirror": {"url": "https://mirror.test/gallery"},
            "sync": {"unmaintained_days": 30, "work_dirs": ["/tmp/a"]},
        })
        assert Constants.MIRROR_MARKETPLACE_URL == "https://mirror.test/gallery"
        assert Constants.UNMAINTAINED_DAYS == 30
        assert Constants.WORK_DIRS == ["/tmp/a"]

    def test_unknown_keys_ignored(self, restore_constants, caplog):
        apply_config({"mirror": {"colour": "blue"}, "other": 3})
        assert "mirror.colour" in caplog.text
        assert "other" in caplog.text

    def test_cli_overrides(self, restore_constants):
        args = SimpleNamespace(SOURCE_URL="https://source.test", MIRROR_URL=None,
                               PUBLISH_COMMAND=["node", "publish.js"])
        apply_cli_overrides(args)
        assert Constants.SOURCE_MARKETPLACE_URL == "https://source.test"
        assert Constants.PUBLISH_COMMAND == ["node", "publish.js"]

"""Tests for command line parsing."""

from args import parse_args, split_extensions


class TestParseArgs:
    """Test CLI flags and their environment defaults."""

    def test_defaults(self, monkeypatch):
        for name in ("EXTENSIONS", "FORCE", "SKIP_BUILD"):
            monkeypatch.delenv(name, raising=False)
        args = parse_args([])
        assert args.REGISTRY_FILE == "extensions.json"
        assert args.EXTENSIONS is None
        assert args.FORCE is False
        assert args.SKIP_BUILD is False
        assert args.OUTPUT == "/tmp/stat.json"
        assert args.FAILED_OUTPUT == "/tmp/failed-extensions.json"
        assert args.LOG_LEVEL is None

    def test_environment_defaults(self, monkeypatch):
        """Test EXTENSIONS, FORCE and SKIP_BUILD are read from the environment."""
        monkeypatch.setenv("EXTENSIONS", " acme.a , acme.b,")
        monkeypatch.setenv("FORCE", "true")
        monkeypatch.setenv("SKIP_BUILD", "TRUE")
        args = parse_args([])
        assert args.EXTENSIONS == ["acme.a", "acme.b"]
        assert args.FORCE is True
        assert args.SKIP_BUILD is True

    def test_non_true_values_are_false(self, monkeypatch):
        monkeypatch.setenv("FORCE", "1")
        assert parse_args([]).FORCE is False

    def test_flags_win(self, monkeypatch):
        monkeypatch.setenv("EXTENSIONS", "acme.a")
        args = parse_args([
            "--extensions", "acme.c",
            "--force",
            "--skip-build",
            "-r", "defs.json",
            "-o", "out.json",
            "--failed-output", "failed.json",
            "--publish-command", "node publish-extension.js",
            "--loglevel", "DEBUG",
        ])
        assert args.EXTENSIONS == ["acme.c"]
        assert args.FORCE and args.SKIP_BUILD
        assert args.REGISTRY_FILE == "defs.json"
        assert args.OUTPUT == "out.json"
        assert args.FAILED_OUTPUT == "failed.json"
        assert args.PUBLISH_COMMAND == ["node", "publish-extension.js"]
        assert args.LOG_LEVEL == "DEBUG"

    def test_split_extensions(self):
        assert split_extensions(None) is None
        assert split_extensions("") == []

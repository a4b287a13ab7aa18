"""Tests for matching a package version against repository tags and releases."""

from repository.version_match import VersionMatcher


class TestVersionMatcher:
    """Test VersionMatcher strategies."""

    def setup_method(self):
        self.matcher = VersionMatcher()

    def test_exact_match(self):
        """Test exact tag name match."""
        result = self.matcher.find_match("1.2.3", [{"name": "1.2.2"}, {"name": "1.2.3"}])
        assert result["matched"] is True
        assert result["match_type"] == "exact"
        assert result["tag_or_release"] == "1.2.3"

    def test_v_prefix_both_directions(self):
        """Test that v1.2.3 and 1.2.3 match each other."""
        assert self.matcher.find_match("1.2.3", [{"name": "v1.2.3"}])["match_type"] == "v-prefix"
        assert self.matcher.find_match("v1.2.3", [{"name": "1.2.3"}])["match_type"] == "v-prefix"

    def test_prefixed_tag(self):
        """Test monorepo style tags like name@version."""
        tags = [{"name": "other@1.2.3-beta"}, {"name": "my-ext@1.2.3"}]
        result = self.matcher.find_match("1.2.3", tags, name="my-ext")
        assert result["match_type"] == "prefixed"
        assert result["tag_or_release"] == "my-ext@1.2.3"

    def test_prefixed_tag_requires_own_name(self):
        """Test a sibling package's tag is never taken for this package."""
        tags = [{"name": "other-ext@1.2.3"}]
        assert self.matcher.find_match("1.2.3", tags, name="mine")["matched"] is False
        assert self.matcher.find_match("1.2.3", tags)["matched"] is False

    def test_prefixed_tag_is_case_insensitive_and_path_scoped(self):
        """Test name prefixes compare case-insensitively, also after a path."""
        assert self.matcher.find_match("1.2.3", [{"name": "My-Ext@1.2.3"}], name="my-ext")["matched"] is True
        result = self.matcher.find_match("1.2.3", [{"name": "packages/my-ext/v1.2.3"}], name="my-ext")
        assert result["match_type"] == "prefixed"

    def test_exact_beats_earlier_prefixed(self):
        """Test strategy priority holds across the whole list, not per entry."""
        tags = [{"tag_name": "mine@1.2.3"}, {"tag_name": "v1.2.3"}]
        result = self.matcher.find_match("1.2.3", tags, name="mine")
        assert result["match_type"] == "v-prefix"
        assert result["tag_or_release"] == "v1.2.3"

    def test_semantic_match(self):
        """Test partial versions match by semantic equality."""
        result = self.matcher.find_match("1.2.0", [{"name": "v1.2"}])
        assert result["matched"] is True
        assert result["match_type"] == "semantic"

    def test_semantic_match_with_own_prefix(self):
        result = self.matcher.find_match("1.2.0", [{"name": "release-1.2"}], name="release")
        assert result["match_type"] == "semantic"
        assert self.matcher.find_match("1.2.0", [{"name": "release-1.2"}], name="other")["matched"] is False

    def test_release_uses_tag_name_not_title(self):
        """Test that a release's free-form name does not hide its tag."""
        release = {"tag_name": "v2.0.0", "name": "Big release 1.0.0"}
        assert self.matcher.find_match("2.0.0", [release])["matched"] is True
        assert self.matcher.find_match("1.0.0", [release])["matched"] is False

    def test_custom_pattern(self):
        """Test a configured pattern with the <v> placeholder."""
        matcher = VersionMatcher(patterns=[r"build_<v>_final"])
        result = matcher.find_match("3.1.4", [{"name": "build_3.1.4_final"}])
        assert result["matched"] is True
        assert result["match_type"] == "pattern"

    def test_invalid_pattern_is_skipped(self):
        """Test an invalid regex never raises."""
        matcher = VersionMatcher(patterns=["(<v>"])
        assert matcher.find_match("1.0.0", [{"name": "nope"}])["matched"] is False

    def test_no_match(self):
        result = self.matcher.find_match("9.9.9", [{"name": "v1.0.0"}])
        assert result == {"matched": False, "match_type": None, "artifact": None, "tag_or_release": None}

    def test_empty_version(self):
        assert self.matcher.find_match("", [{"name": "1.0.0"}])["matched"] is False

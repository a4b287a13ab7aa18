"""Tests for the GitHub REST client."""

from unittest.mock import patch

from repository.github import GitHubClient


class TestGitHubClient:
    """Test GitHubClient request building and response shaping."""

    def setup_method(self):
        self.client = GitHubClient(base_url="https://api.github.test", token="ghp_secret")

    def test_headers_include_token(self):
        headers = self.client._get_headers()
        assert headers["Authorization"] == "Bearer ghp_secret"
        assert headers["Accept"] == "application/vnd.github+json"

    def test_token_from_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "from-env")
        assert GitHubClient().token == "from-env"

    @patch('repository.github.get_json')
    def test_get_repo(self, mock_get_json):
        mock_get_json.return_value = (200, {}, {"default_branch": "main", "archived": True, "pushed_at": "x"})
        assert self.client.get_repo("acme", "ext") == {"default_branch": "main", "pushed_at": "x", "archived": True}
        assert mock_get_json.call_args[0][0] == "https://api.github.test/repos/acme/ext"

    @patch('repository.github.get_json')
    def test_get_repo_missing(self, mock_get_json):
        mock_get_json.return_value = (404, {}, None)
        assert self.client.get_repo("acme", "ext") is None

    @patch('repository.github.get_json')
    def test_releases_follow_link_pagination(self, mock_get_json):
        """Test pages are followed through the Link header."""
        next_url = "https://api.github.test/repos/acme/ext/releases?per_page=100&page=2"
        mock_get_json.side_effect = [
            (200, {"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'}, [{"tag_name": "v2"}]),
            (200, {}, [{"tag_name": "v1"}]),
        ]
        releases = self.client.get_releases("acme", "ext")
        assert [r["tag_name"] for r in releases] == ["v2", "v1"]
        assert mock_get_json.call_args_list[0][0][0] == "https://api.github.test/repos/acme/ext/releases?per_page=100"
        assert mock_get_json.call_args_list[1][0][0] == next_url

    @patch('repository.github.get_json')
    def test_tags_stop_on_error(self, mock_get_json):
        mock_get_json.return_value = (500, {}, None)
        assert self.client.get_tags("acme", "ext") == []

    @patch('repository.github.get_json')
    def test_latest_commit_with_until(self, mock_get_json):
        """Test branch and until are passed as query parameters."""
        mock_get_json.return_value = (
            200, {}, [{"sha": "abc", "commit": {"committer": {"date": "2024-01-01T00:00:00Z"}}}]
        )
        commit = self.client.get_latest_commit("acme", "ext", "main", "2024-01-02T00:00:00Z")
        assert commit == {"sha": "abc", "date": "2024-01-01T00:00:00Z"}
        url = mock_get_json.call_args[0][0]
        assert "sha=main" in url
        assert "until=2024-01-02T00%3A00%3A00Z" in url
        assert "per_page=1" in url

    @patch('repository.github.get_json')
    def test_latest_commit_empty(self, mock_get_json):
        mock_get_json.return_value = (200, {}, [])
        assert self.client.get_latest_commit("acme", "ext") is None

    @patch('repository.github.get_json')
    def test_get_file_json(self, mock_get_json):
        """Test raw file content is requested at a ref."""
        mock_get_json.return_value = (200, {}, {"version": "1.0.0"})
        assert self.client.get_file_json("acme", "ext", "packages/ext/package.json", "abc") == {"version": "1.0.0"}
        url = mock_get_json.call_args[0][0]
        headers = mock_get_json.call_args[1]["headers"]
        assert url == "https://api.github.test/repos/acme/ext/contents/packages/ext/package.json?ref=abc"
        assert headers["Accept"] == "application/vnd.github.raw+json"

"""GitHub API client for repository information.

Provides a lightweight REST client for fetching the upstream artifacts the
resolver chooses between: releases, tags, commits and manifest files.
"""
from __future__ import annotations

import os
import re
from typing import List, Optional, Dict, Any
from urllib.parse import quote, urlencode

from constants import Constants
from common.http_client import get_json

_LINK_NEXT = re.compile(r'<([^>]+)>;\s*rel="next"')


class GitHubClient:
    """Lightweight REST client for GitHub API operations.

    Supports optional authentication via GITHUB_TOKEN environment variable.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None):
        """Initialize GitHub client.

        Args:
            base_url: Base URL for GitHub API (defaults to Constants.GITHUB_API_BASE)
            token: GitHub personal access token (defaults to GITHUB_TOKEN env var)
        """
        self.base_url = (base_url or Constants.GITHUB_API_BASE).rstrip("/")
        self.token = token or os.environ.get(Constants.ENV_GITHUB_TOKEN)

    def _get_headers(self, accept: str = "application/vnd.github+json") -> Dict[str, str]:
        """Get request headers including authorization if token is available."""
        headers = {"Accept": accept}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _repo_url(self, owner: str, repo: str) -> str:
        return f"{self.base_url}/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"

    def get_repo(self, owner: str, repo: str) -> Optional[Dict[str, Any]]:
        """Fetch repository metadata.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            Dict with default_branch and pushed_at, or None on error
        """
        status, _, data = get_json(self._repo_url(owner, repo), headers=self._get_headers())
        if status == 200 and isinstance(data, dict):
            return {
                "default_branch": data.get("default_branch"),
                "pushed_at": data.get("pushed_at"),
                "archived": data.get("archived"),
            }
        return None

    def get_releases(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Fetch repository releases (newest first) with pagination.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of release dictionaries
        """
        return self._get_paginated_results(f"{self._repo_url(owner, repo)}/releases")

    def get_tags(self, owner: str, repo: str) -> List[Dict[str, Any]]:
        """Fetch repository tags with pagination.

        Args:
            owner: Repository owner
            repo: Repository name

        Returns:
            List of tag dictionaries
        """
        return self._get_paginated_results(f"{self._repo_url(owner, repo)}/tags")

    def get_latest_commit(
        self,
        owner: str,
        repo: str,
        branch: Optional[str] = None,
        until: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get the most recent commit on a branch, optionally at or before a time.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Branch name (repository default branch when None)
            until: ISO 8601 timestamp upper bound

        Returns:
            Dict with sha and date, or None on error or when no commit qualifies
        """
        params = {"per_page": 1}
        if branch:
            params["sha"] = branch
        if until:
            params["until"] = until
        url = f"{self._repo_url(owner, repo)}/commits?{urlencode(params)}"
        status, _, data = get_json(url, headers=self._get_headers())
        if status == 200 and data and isinstance(data, list):
            first = data[0] if isinstance(data[0], dict) else {}
            commit = first.get("commit") or {}
            committer = commit.get("committer") or {}
            if first.get("sha"):
                return {"sha": first["sha"], "date": committer.get("date")}
        return None

    def get_file_json(self, owner: str, repo: str, path: str, ref: str) -> Optional[Any]:
        """Fetch and parse a JSON file at a given ref.

        Args:
            owner: Repository owner
            repo: Repository name
            path: File path inside the repository
            ref: Commit sha, branch or tag

        Returns:
            Parsed JSON content or None if missing or unparseable
        """
        url = (
            f"{self._repo_url(owner, repo)}/contents/{quote(path.lstrip('/'))}"
            f"?{urlencode({'ref': ref})}"
        )
        status, _, data = get_json(url, headers=self._get_headers("application/vnd.github.raw+json"))
        if status == 200:
            return data
        return None

    def _get_paginated_results(self, url: str) -> List[Dict[str, Any]]:
        """Fetch all pages of a paginated endpoint.

        Args:
            url: Base URL for paginated endpoint

        Returns:
            List of all results across pages
        """
        results: List[Dict[str, Any]] = []
        current_url: Optional[str] = f"{url}?per_page={Constants.REPO_API_PER_PAGE}"

        while current_url:
            status, headers, data = get_json(current_url, headers=self._get_headers())

            if status != 200 or not data:
                break

            results.extend(data)
            current_url = self._get_next_page(headers)

        return results

    def _get_next_page(self, headers: Dict[str, str]) -> Optional[str]:
        """Extract the next page URL from the Link response header.

        Args:
            headers: Response headers

        Returns:
            Next page URL or None
        """
        link = headers.get("Link") or headers.get("link")
        if not link:
            return None
        match = _LINK_NEXT.search(link)
        return match.group(1) if match else None

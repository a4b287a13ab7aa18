"""Repository URL normalization.

Turns the free-form repository URLs found in the registry definition into a
RepoRef with host, owner and repository name.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

_SCP_LIKE = re.compile(r"^git@([^:]+):(.+)$")


@dataclass(frozen=True)
class RepoRef:
    """Normalized reference to a hosted repository."""

    normalized_url: str
    host: str
    owner: str
    repo: str
    directory: Optional[str] = None


def _host_type(hostname: str) -> str:
    hostname = hostname.lower()
    if hostname in ("github.com", "www.github.com"):
        return "github"
    if hostname in ("gitlab.com", "www.gitlab.com"):
        return "gitlab"
    return hostname


def normalize_repo_url(url: Optional[str]) -> Optional[RepoRef]:
    """Normalize a repository URL.

    Handles ``git+`` prefixes, ``git@host:owner/repo`` forms, ``.git`` suffixes
    and ``/tree/<branch>/<dir>`` paths.

    Args:
        url: Repository URL as written in a definition

    Returns:
        RepoRef, or None if the URL does not name an owner/repo pair
    """
    if not url:
        return None
    text = url.strip()
    if text.startswith("git+"):
        text = text[4:]
    scp = _SCP_LIKE.match(text)
    if scp:
        text = f"https://{scp.group(1)}/{scp.group(2)}"

    parsed = urlparse(text)
    if not parsed.hostname:
        return None
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None

    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[:-4]
    directory = None
    if len(parts) > 4 and parts[2] == "tree":
        directory = "/".join(parts[4:])

    host = _host_type(parsed.hostname)
    return RepoRef(
        normalized_url=f"https://{parsed.hostname.lower()}/{owner}/{repo}",
        host=host,
        owner=owner,
        repo=repo,
        directory=directory,
    )

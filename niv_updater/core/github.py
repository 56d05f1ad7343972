"""GitHub URL utilities."""

from __future__ import annotations

import re

DEFAULT_HOST = "github.com"

_SSH_URL_RE = re.compile(r"^ssh://git@(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+)$")
_SCP_URL_RE = re.compile(r"^git@(?P<host>[^:/]+):(?P<path>.+)$")
_HTTPS_URL_RE = re.compile(r"^(?:https?|git)://(?:[^@/]+@)?(?P<host>[^/:]+)(?::\d+)?/(?P<path>.+)$")


def parse_repo_url(repo_url: str, host: str = DEFAULT_HOST) -> tuple[str, str]:
    """Extract (owner, repo) from a GitHub URL on *host*.

    Raises ValueError if the URL cannot be parsed or points elsewhere.
    """
    result = extract_owner_repo(repo_url, host)
    if result is None:
        raise ValueError(f"cannot parse GitHub repo URL: {repo_url!r}")
    owner, repo = result.split("/", 1)
    return owner, repo


def extract_owner_repo(repo_url: str, host: str = DEFAULT_HOST) -> str | None:
    """Extract 'owner/repo' from a URL hosted on *host*.

    Handles:
      - https://github.com/owner/repo(.git)
      - ssh://git@github.com/owner/repo(.git)
      - git@github.com:owner/repo(.git)
    """
    url = repo_url.strip().rstrip("/")
    for pattern in (_SSH_URL_RE, _SCP_URL_RE, _HTTPS_URL_RE):
        match = pattern.match(url)
        if match is not None:
            break
    else:
        return None
    if match.group("host").lower() != host.lower():
        return None
    return _owner_repo_from_path(match.group("path"))


def ssh_owner_repo(repo_url: str, host: str = DEFAULT_HOST) -> str | None:
    """Return 'owner/repo' when *repo_url* is an SSH URL on *host*, else None."""
    url = repo_url.strip().rstrip("/")
    match = _SSH_URL_RE.match(url) or _SCP_URL_RE.match(url)
    if match is None or match.group("host").lower() != host.lower():
        return None
    return _owner_repo_from_path(match.group("path"))


def web_url(host: str, owner: str, repo: str) -> str:
    return f"https://{host}/{owner}/{repo}"


def _owner_repo_from_path(path: str) -> str | None:
    if path.endswith(".git"):
        path = path[:-4]
    parts = path.split("/")
    if len(parts) == 2 and all(parts):
        return f"{parts[0]}/{parts[1]}"
    return None

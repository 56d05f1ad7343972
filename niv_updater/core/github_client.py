"""Async GitHub REST client covering the calls the updater needs."""

from __future__ import annotations

import asyncio
import base64
import time
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from niv_updater.exceptions import GitHubAPIError

log = structlog.get_logger("niv_updater.github")

DEFAULT_API_URL = "https://api.github.com"


class GitHubClient:
    """Thin async wrapper around the GitHub REST API.

    Every method issues exactly one request. Failed requests are never
    retried; the only waiting done here is sleeping out an exhausted rate
    limit after a response has been received.
    """

    def __init__(
        self,
        token: str | None,
        *,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"token {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── generic ────────────────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request; raise :class:`GitHubAPIError` unless it succeeded."""
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise GitHubAPIError(method, path, None, f"{type(exc).__name__}: {exc}") from exc

        await self._check_rate_limit(response)

        if response.status_code >= 400:
            raise GitHubAPIError(method, path, response.status_code, _error_message(response))
        return response

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.request("GET", path, params=params)
        return response.json()

    # ── repository reads ───────────────────────────────────────────────────

    async def get_default_branch(self, repository: str) -> str:
        data = await self.get(f"/repos/{repository}")
        return data["default_branch"]

    async def get_branch_head(self, repository: str, branch: str) -> str:
        """Return the commit sha the branch currently points at."""
        data = await self.get(f"/repos/{repository}/branches/{_quote_ref(branch)}")
        return data["commit"]["sha"]

    async def branch_exists(self, repository: str, branch: str) -> bool:
        """Live existence check; 404 means absent, other errors propagate."""
        try:
            await self.request("GET", f"/repos/{repository}/git/ref/heads/{_quote_ref(branch)}")
        except GitHubAPIError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    async def get_contents(self, repository: str, path: str, ref: str) -> tuple[str, str]:
        """Return ``(decoded_text, blob_sha)`` of a file at *ref*."""
        data = await self.get(f"/repos/{repository}/contents/{path}", params={"ref": ref})
        if not isinstance(data, dict) or data.get("type", "file") != "file":
            raise GitHubAPIError("GET", f"/repos/{repository}/contents/{path}", 200, "not a file")
        encoded = data.get("content") or ""
        if data.get("encoding", "base64") != "base64":
            raise GitHubAPIError(
                "GET",
                f"/repos/{repository}/contents/{path}",
                200,
                f"unsupported encoding {data.get('encoding')!r}",
            )
        text = base64.b64decode(encoded).decode("utf-8")
        return text, data["sha"]

    async def compare(self, owner: str, repo: str, base: str, head: str) -> list[dict[str, Any]]:
        """Return the commit list of ``base...head``."""
        data = await self.get(f"/repos/{owner}/{repo}/compare/{base}...{head}")
        return list(data.get("commits") or [])

    # ── repository writes ──────────────────────────────────────────────────

    async def create_branch(self, repository: str, branch: str, sha: str) -> dict[str, Any]:
        response = await self.request(
            "POST",
            f"/repos/{repository}/git/refs",
            json={"ref": f"refs/heads/{branch}", "sha": sha},
        )
        return response.json()

    async def delete_branch(self, repository: str, branch: str) -> None:
        await self.request("DELETE", f"/repos/{repository}/git/refs/heads/{_quote_ref(branch)}")

    async def update_file(
        self,
        repository: str,
        path: str,
        *,
        content: str,
        blob_sha: str,
        branch: str,
        message: str,
    ) -> dict[str, Any]:
        """Commit *content* over the file identified by *blob_sha* on *branch*."""
        response = await self.request(
            "PUT",
            f"/repos/{repository}/contents/{path}",
            json={
                "message": message,
                "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
                "sha": blob_sha,
                "branch": branch,
            },
        )
        return response.json()

    async def create_pull_request(
        self, repository: str, *, title: str, body: str, head: str, base: str
    ) -> dict[str, Any]:
        response = await self.request(
            "POST",
            f"/repos/{repository}/pulls",
            json={"title": title, "body": body, "head": head, "base": base},
        )
        return response.json()

    async def add_labels(self, repository: str, number: int, labels: list[str]) -> None:
        await self.request(
            "POST",
            f"/repos/{repository}/issues/{number}/labels",
            json={"labels": labels},
        )

    # ── internal ───────────────────────────────────────────────────────────

    async def _check_rate_limit(self, response: httpx.Response) -> None:
        """Sleep until rate-limit resets if remaining == 0."""
        remaining = self._parse_header_int(response.headers.get("X-RateLimit-Remaining"))
        if remaining is not None and remaining == 0:
            wait = self._get_rate_limit_wait(response)
            log.warning("github.rate_limit_wait", wait_seconds=wait)
            await asyncio.sleep(wait)

    @staticmethod
    def _get_rate_limit_wait(response: httpx.Response) -> int:
        """Calculate how long to wait based on rate-limit headers."""
        retry_after = response.headers.get("Retry-After")
        if retry_after is not None:
            try:
                return max(int(retry_after), 1)
            except (ValueError, TypeError):
                pass
        reset_ts = response.headers.get("X-RateLimit-Reset")
        if reset_ts is not None:
            try:
                return max(int(reset_ts) - int(time.time()), 1)
            except (ValueError, TypeError):
                pass
        return 60

    @staticmethod
    def _parse_header_int(value: str | None) -> int | None:
        if value is None:
            return None
        try:
            return int(value)
        except (ValueError, TypeError):
            return None


def _quote_ref(branch: str) -> str:
    return quote(branch, safe="/")


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return response.reason_phrase

"""Qualify issue and pull request references found in upstream commit messages."""

from __future__ import annotations

import re

# Bare "#123" only: "owner/repo#123", "&#123;" and "abc#1" are left alone.
ISSUE_REF_PATTERN = re.compile(r"(?<![\w/&#])#(\d+)\b")


def qualify_refs(text: str, owner: str, repo: str) -> str:
    """Rewrite ``#N`` to ``owner/repo#N``.

    The changelog is posted in the repository that pins the dependency, where
    a bare ``#N`` would link to the wrong issue.
    """
    return ISSUE_REF_PATTERN.sub(rf"{owner}/{repo}#\1", text)

"""Remote URL parsing.

Two shapes are recognized:

    git@host:org/group/project.git       (SSH, scp-like)
    https://host/org/group/project.git   (HTTP or HTTPS)

The first path segment is the organization; the rest, joined with "/", is
the project path. A trailing ".git" is optional in both shapes.
"""

import re

from repovault.core.errors import MalformedIdentifier
from repovault.core.types import ParsedRemote

_SSH_PATTERN = re.compile(r"^[\w.+-]+@([^:/\s]+):(?P<path>.+)$")
_HTTP_PATTERN = re.compile(r"^https?://([^/\s]+)/(?P<path>.+)$")


def _strip_suffix(path: str) -> str:
    path = path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    return path


def parse_remote_url(url: str) -> ParsedRemote:
    """
    Parse a remote URL into organization and project path.

    Args:
        url: SSH or HTTP(S) remote URL

    Returns:
        ParsedRemote for the URL. A single-segment path such as
        ``git@host:org.git`` yields an empty project path.

    Raises:
        MalformedIdentifier: If the URL matches neither shape.
    """
    candidate = url.strip()
    match = _SSH_PATTERN.match(candidate) or _HTTP_PATTERN.match(candidate)
    if match is None:
        raise MalformedIdentifier(url)

    path = _strip_suffix(match.group("path"))
    segments = path.split("/")
    if not segments[0]:
        raise MalformedIdentifier(url)

    return ParsedRemote(organization=segments[0], project_path="/".join(segments[1:]))

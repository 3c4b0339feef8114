"""Parsing of external media (YouTube) references."""

import re

_ID = r"([A-Za-z0-9_-]{11})"

MEDIA_URL_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"youtube\.com/shorts/{_ID}"),
    re.compile(rf"youtube\.com/watch\?.*v={_ID}"),
    re.compile(rf"youtu\.be/{_ID}"),
    re.compile(rf"youtube\.com/embed/{_ID}"),
    re.compile(rf"youtube\.com/v/{_ID}"),
)
_BARE_ID_PATTERN = re.compile(_ID)


def extract_media_ref(url: str) -> str | None:
    """Return the 11-character video id referenced by ``url``.

    Shorts, watch, short-link, embed and legacy ``/v/`` URLs are recognized.
    Failing those, the first 11-character id-like token is used.

    Args:
        url: URL or bare id entered by the user.

    Returns:
        The video id, or None when nothing matches.
    """
    trimmed = url.strip()
    for pattern in MEDIA_URL_PATTERNS:
        if match := pattern.search(trimmed):
            return match.group(1)
    if match := _BARE_ID_PATTERN.search(trimmed):
        return match.group(1)
    return None


def thumbnail_for(media_ref: str) -> str:
    """Return the high-resolution thumbnail URL of a video id."""
    return f"https://img.youtube.com/vi/{media_ref}/maxresdefault.jpg"

# podpicker/transcripts/title.py
"""
Best-effort video title resolution from the watch page.

Never raises apart from ExtractionCancelled: any fetch or parse problem
yields "YouTube Video {video_id}".
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from bs4 import BeautifulSoup

from podpicker.logging_core.logger import log_event
from podpicker.transcripts.errors import ExtractionCancelled
from podpicker.transcripts.http import HttpClient


WATCH_URL = "https://www.youtube.com/watch"
_TITLE_SUFFIX = re.compile(r"(?:^|\s+)-\s+YouTube\s*$")

_TITLE_ELEMENT = re.compile(r"<title\b[^>]*>.*?</title>", re.DOTALL | re.IGNORECASE)


def placeholder_title(video_id: str) -> str:
    return f"YouTube Video {video_id}"


def parse_title(html: str) -> Optional[str]:
    """Return the page title without the " - YouTube" suffix, or None if there isn't a usable one."""
    match = _TITLE_ELEMENT.search(html)
    if not match:
        return None

    # Parse only the <title> fragment; watch pages run to megabytes
    tag = BeautifulSoup(match.group(0), "html.parser").title
    if tag is None:
        return None

    title = _TITLE_SUFFIX.sub("", tag.get_text().strip()).strip()
    if not title or title == "YouTube":
        return None
    return title


def resolve_title(video_id: str, client: HttpClient, logger: Optional[logging.LoggerAdapter] = None) -> str:
    try:
        html = client.get_text(WATCH_URL, params={"v": video_id})
        title = parse_title(html)
    except ExtractionCancelled:
        raise
    except Exception as exc:  # pylint: disable=broad-except
        if logger is not None:
            log_event(
                logger,
                logging.WARNING,
                "Title lookup failed, using placeholder",
                component="title",
                event_type="fallback",
                metadata={"video_id": video_id, "error": str(exc)},
            )
        return placeholder_title(video_id)

    if title is None:
        if logger is not None:
            log_event(
                logger,
                logging.WARNING,
                "No title in watch page, using placeholder",
                component="title",
                event_type="fallback",
                metadata={"video_id": video_id},
            )
        return placeholder_title(video_id)

    return title

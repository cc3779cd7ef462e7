"""Fetching, parsing and date handling for RSS feeds."""

from __future__ import annotations

import html
import re
import urllib.request
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from datetime import datetime, timezone


class FeedError(Exception):
    """A feed could not be fetched or decoded."""


@dataclass
class RSSItem:
    title: str = ""
    link: str = ""
    description: str = ""
    pub_date: str = ""

    def __str__(self) -> str:
        return (
            f"| Post Title: \t\t\t{self.title}\n"
            f"| Post Date: \t\t\t{self.pub_date}\n"
            f"| Post Link: \t\t\t{self.link}"
        )


@dataclass
class RSSFeed:
    title: str = ""
    link: str = ""
    description: str = ""
    items: list[RSSItem] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"Feed Title: \t\t\t{self.title}\n"
            f"Feed Link: \t\t\t{self.link}\n"
            f"Feed Post Count:\t\t{len(self.items)}"
        )


def _text(parent: ET.Element, tag: str) -> str:
    child = parent.find(tag)
    return "".join(child.itertext()) if child is not None else ""


def parse_feed(data: bytes | str) -> RSSFeed:
    """Decode an RSS document, unescaping HTML entities in titles and descriptions."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise FeedError(f"failed to decode xml: {exc}") from exc
    channel = root.find("channel")
    if channel is None:
        return RSSFeed()
    items = [
        RSSItem(
            title=html.unescape(_text(item, "title")),
            link=_text(item, "link"),
            description=html.unescape(_text(item, "description")),
            pub_date=_text(item, "pubDate"),
        )
        for item in channel.findall("item")
    ]
    return RSSFeed(
        title=html.unescape(_text(channel, "title")),
        link=_text(channel, "link"),
        description=html.unescape(_text(channel, "description")),
        items=items,
    )


def fetch_feed(feed_url: str, timeout: float | None = None) -> RSSFeed:
    """Download and parse the feed at *feed_url*."""
    try:
        request = urllib.request.Request(feed_url, headers={"Agent": "gator"}, method="GET")
    except ValueError as exc:
        raise FeedError(f"failed to build request: {exc}") from exc
    try:
        if timeout is None:
            response = urllib.request.urlopen(request)
        else:
            response = urllib.request.urlopen(request, timeout=timeout)
        with response:
            body = response.read()
    except (OSError, ValueError) as exc:
        raise FeedError(f"failed to fetch feed: {exc}") from exc
    return parse_feed(body)


_ZONE_NAME = re.compile(r"\b[A-Z]{3,5}\b")
_ISO = re.compile(
    r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})$"
)

# (strptime format, whether the input carries a zone abbreviation)
_LAYOUTS = [
    ("%d %b %y %H:%M %z", True),  # RFC822
    ("%a, %d %b %Y %H:%M:%S %z", False),  # RFC1123Z
    ("%d %b %y %H:%M %z", False),  # RFC822Z
    ("%A, %d-%b-%y %H:%M:%S %z", True),  # RFC850
    ("%a, %d %b %Y %H:%M:%S %z", True),  # RFC1123
    (None, False),  # RFC3339 / RFC3339Nano
    ("%m/%d %I:%M:%S%p '%y %z", False),  # reference layout
    ("%a %b %d %H:%M:%S %Y", False),  # ANSIC
    ("%a %b %d %H:%M:%S %z %Y", True),  # UnixDate
    ("%a %b %d %H:%M:%S %z %Y", False),  # RubyDate
]


def _parse_iso(text: str) -> datetime | None:
    match = _ISO.match(text)
    if match is None:
        return None
    base, fraction, zone = match.groups()
    micro = (fraction or "").ljust(6, "0")[:6]
    zone = "+00:00" if zone == "Z" else zone
    try:
        return datetime.fromisoformat(f"{base}.{micro}{zone}")
    except ValueError:
        return None


def _parse_layout(fmt: str, zoned: bool, text: str) -> datetime | None:
    if zoned:
        names = list(_ZONE_NAME.finditer(text))
        if not names:
            return None
        last = names[-1]
        text = text[: last.start()] + "+0000" + text[last.end():]
    try:
        parsed = datetime.strptime(text, fmt)
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


def parse_post_date(post_date: str) -> datetime:
    """Parse a post date with the first of the known layouts that accepts it."""
    for fmt, zoned in _LAYOUTS:
        parsed = _parse_iso(post_date) if fmt is None else _parse_layout(fmt, zoned, post_date)
        if parsed is not None:
            return parsed
    raise ValueError(f"unable to parse date '{post_date}' with configured layouts")
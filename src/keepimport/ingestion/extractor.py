"""Note extraction from Keep HTML documents with JSON-LD and markup sources."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from keepimport.ingestion.models import MarkupSource, NoteSource, ParsedNote, StructuredSource
from keepimport.ingestion.normalization import normalize_whitespace

logger = logging.getLogger(__name__)

JSON_LD_TYPE = "application/ld+json"
CHECKED_BOX = "☑"
UNCHECKED_BOX = "☐"


def _first_string(data: Mapping[str, Any], *keys: str) -> str:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def parse_timestamp(value: object) -> datetime | None:
    """Parse a JSON-LD date value into an aware datetime, or return None.

    Accepts ISO 8601 strings (a trailing ``Z`` included), RFC 2822 strings and
    numeric epoch milliseconds. Naive values are read as UTC.
    """

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if not isinstance(value, str) or not value.strip():
        return None

    raw = value.strip()
    parsed: datetime | None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(raw)
        except (TypeError, ValueError, IndexError):
            parsed = None

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed


def _recover_created_at(data: Mapping[str, Any]) -> datetime | None:
    for key in ("dateCreated", "dateModified"):
        parsed = parse_timestamp(data.get(key))
        if parsed is not None:
            return parsed
    return None


def _render_checklist(items: list[Any]) -> str:
    lines: list[str] = []
    for item in items:
        if isinstance(item, Mapping):
            text = _first_string(item, "text", "name")
            box = CHECKED_BOX if item.get("checked") is True else UNCHECKED_BOX
        else:
            text = ""
            box = UNCHECKED_BOX
        lines.append(f"{box} {text}")
    return "\n".join(lines)


def _from_structured(source: StructuredSource) -> ParsedNote | None:
    data = source.data if isinstance(source.data, Mapping) else {}

    title = _first_string(data, "name", "headline")
    items = data.get("itemListElement")
    if isinstance(items, list):
        content = _render_checklist(items)
    else:
        content = _first_string(data, "text", "description")

    content = content.strip()
    if not content:
        return None

    return ParsedNote(title=title.strip(), content=content, created_at=_recover_created_at(data))


def _joined_text(soup: BeautifulSoup, selector: str) -> str:
    return "".join(node.get_text() for node in soup.select(selector))


def _from_markup(source: MarkupSource) -> ParsedNote | None:
    soup = source.soup
    title = _joined_text(soup, "title") or _joined_text(soup, ".title")

    if soup.select_one(".content") is not None:
        raw_content = _joined_text(soup, ".content")
    else:
        body = soup.body or soup
        raw_content = body.get_text()

    content = normalize_whitespace(raw_content)
    if not content:
        return None

    return ParsedNote(title=title.strip(), content=content)


def _load_json_ld(soup: BeautifulSoup) -> Any | None:
    script = soup.find("script", attrs={"type": JSON_LD_TYPE})
    if script is None:
        return None

    payload_text = script.string if script.string is not None else script.get_text()
    if not payload_text or not payload_text.strip():
        return None

    try:
        payload = json.loads(payload_text)
    except json.JSONDecodeError as exc:
        logger.warning("JSON-LD parse failed, falling back to HTML parse: %s", exc)
        return None

    if isinstance(payload, list):
        payload = payload[0] if payload else None
    # null, false, 0 and "" carry no note; an empty object still does
    if payload is None or payload == "" or payload == 0:
        return None
    return payload


def locate_source(document: str) -> NoteSource:
    """Pick the note source for a document: JSON-LD when usable, markup otherwise."""

    soup = BeautifulSoup(document, "lxml")
    payload = _load_json_ld(soup)
    if payload is None:
        return MarkupSource(soup=soup)
    return StructuredSource(data=payload)


def extract_note(document: str) -> ParsedNote | None:
    """Extract at most one note from a decoded Keep HTML document.

    A structured source with empty content yields ``None`` without consulting
    the markup; the two sources are never combined.
    """

    source = locate_source(document)
    if isinstance(source, StructuredSource):
        return _from_structured(source)
    return _from_markup(source)

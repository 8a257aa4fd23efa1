"""Normalize decoded front matter into the new theme's fixed schema.

The new front matter always carries, in this order:

  title, slug, summary, date, math, authors, tags, image, draft

``title``, ``slug``, ``date`` and ``tags`` are required. When the source
has no front matter, or it cannot be decoded, they are derived from the
filename instead and the post is still migrated. Keys outside the schema
are dropped.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import yaml

from migration.front_matter import FrontMatter, FrontMatterError, decode_front_matter
from migration.post_names import PostNames
from migration.rewriter import (
    DEFAULT_ASSETS_PREFIX,
    UNSAFE,
    find_first_image,
    resolve_image_path,
)

logger = logging.getLogger("migration")

DEFAULT_AUTHORS = ("admin",)
TRUE_STRINGS = {"true", "yes", "on", "1"}


@dataclass
class FeaturedImage:
    filename: str
    caption: str | None = None

    def to_dict(self) -> dict[str, str]:
        data = {"filename": self.filename}
        if self.caption is not None:
            data["caption"] = self.caption
        return data


@dataclass
class PostMetadata:
    title: str
    slug: str
    date: str
    tags: list[str] = field(default_factory=list)
    summary: str | None = None
    math: bool = False
    authors: list[str] = field(default_factory=lambda: list(DEFAULT_AUTHORS))
    draft: bool = False
    image: FeaturedImage | None = None
    # Raw ``image`` value of the old front matter; only used to find assets.
    source_image: Any = None

    def to_front_matter(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title, "slug": self.slug}
        if self.summary is not None:
            data["summary"] = self.summary
        data["date"] = self.date
        data["math"] = self.math
        data["authors"] = list(self.authors)
        data["tags"] = list(self.tags)
        if self.image is not None:
            data["image"] = self.image.to_dict()
        data["draft"] = self.draft
        return data


def now_iso() -> str:
    """Current UTC instant, e.g. ``2024-05-01T12:00:00.000Z``."""
    stamp = dt.datetime.now(dt.timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def to_string(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (dt.datetime, dt.date)):
        return value.isoformat()
    return str(value)


def to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def normalize_sequence(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return []
        # "[a, b]" written as a plain string
        if stripped.startswith("[") and stripped.endswith("]"):
            try:
                parsed = yaml.safe_load(stripped)
                return normalize_sequence(parsed)
            except yaml.YAMLError:
                pass
        pieces = [part.strip() for part in re.split(r"[,\n]+", value)]
        return [p for p in pieces if p]
    if isinstance(value, Iterable) and not isinstance(value, dict):
        result = []
        for item in value:
            if item is None:
                continue
            text = str(item).strip()
            if text:
                result.append(text)
        return result
    return [str(value).strip()]


def default_record(names: PostNames, now: str) -> dict[str, Any]:
    return {
        "title": names.slug,
        "slug": names.slug,
        "date": now,
        "tags": [],
    }


def load_source_record(
    front_matter: FrontMatter | None,
    names: PostNames,
    now: str,
    source_name: str = "<text>",
) -> dict[str, Any]:
    """Decode ``front_matter``, falling back to filename defaults on any failure."""
    if front_matter is None:
        logger.warning("%s: no front matter found, generating default metadata", source_name)
        return default_record(names, now)

    logger.debug("%s: raw %s front matter:\n%s", source_name, front_matter.encoding.value, front_matter.text)
    try:
        record = decode_front_matter(front_matter)
    except FrontMatterError as exc:
        logger.warning(
            "%s: failed to parse front matter (%s), generating default metadata",
            source_name,
            exc,
        )
        return default_record(names, now)
    logger.debug("%s: parsed front matter: %r", source_name, record)
    return record


def normalize_metadata(
    front_matter: FrontMatter | None,
    names: PostNames,
    now: str | None = None,
    default_authors: Iterable[str] = DEFAULT_AUTHORS,
    source_name: str = "<text>",
) -> PostMetadata:
    """Build :class:`PostMetadata` with every required field populated.

    Required fields missing from a decoded record are filled one by one
    from the filename defaults. ``summary`` and ``image`` are left for the
    caller, which has the body.
    """
    now = now or now_iso()
    record = load_source_record(front_matter, names, now, source_name)
    defaults = default_record(names, now)

    title = to_string(record.get("title")).strip() or defaults["title"]
    slug = to_string(record.get("slug")).strip() or defaults["slug"]
    date = to_string(record.get("date")).strip() or defaults["date"]
    tags = normalize_sequence(record.get("tags"))

    authors_value = record.get("authors")
    authors = normalize_sequence(authors_value) if authors_value is not None else list(default_authors)

    metadata = PostMetadata(
        title=title,
        slug=slug,
        date=date,
        tags=tags,
        math=to_bool(record.get("math", False)),
        authors=authors,
        draft=to_bool(record.get("draft", False)),
        source_image=record.get("image"),
    )
    logger.debug("%s: math=%s draft=%s", source_name, metadata.math, metadata.draft)
    return metadata


def select_featured_image(
    source_image: Any,
    body: str,
    dir_name: str,
    assets_prefix: str = DEFAULT_ASSETS_PREFIX,
    source_name: str = "<text>",
) -> FeaturedImage | None:
    """Pick ``image.filename`` from the old ``image`` field or the first body image.

    A string field is an old site path; its assets prefix and post
    directory are stripped. A mapping is already in the new shape and may
    carry a caption.
    """
    caption = None
    filename = None
    if isinstance(source_image, str) and source_image.strip():
        resolved = resolve_image_path(source_image.strip(), "", assets_prefix)
        if resolved.kind == UNSAFE:
            logger.warning("%s: image field %s is not a site asset path, ignored", source_name, source_image)
        else:
            segments = resolved.segments
            filename = "/".join(segments[1:]) if len(segments) > 1 else segments[0]
            logger.debug("%s: image.filename from front matter: %s", source_name, filename)
    elif isinstance(source_image, dict):
        if source_image.get("caption") is not None:
            caption = to_string(source_image["caption"])
        raw = to_string(source_image.get("filename")).strip()
        if raw:
            filename = raw

    if filename is None:
        filename = find_first_image(body, dir_name, assets_prefix)
        if filename:
            logger.debug("%s: image.filename from first body image: %s", source_name, filename)

    if not filename:
        logger.debug("%s: no featured image", source_name)
        return None
    return FeaturedImage(filename=filename, caption=caption)

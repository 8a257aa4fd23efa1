"""Build the plain-text ``summary`` field from the first paragraph line of a post."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger("migration")

DEFAULT_SUMMARY = "No summary available"

# Applied in order, one global pass each.
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
BOLD_PATTERN = re.compile(r"(?:\*\*|__)(.*?)(?:\*\*|__)")
ITALIC_PATTERN = re.compile(r"(?:\*|_)(.*?)(?:\*|_)")
CODE_PATTERN = re.compile(r"`([^`]+)`")
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def markdown_to_plain_text(markdown: str) -> str:
    if not markdown:
        return ""
    text = IMAGE_PATTERN.sub(r"\1", markdown)
    text = LINK_PATTERN.sub(r"\1", text)
    text = BOLD_PATTERN.sub(r"\1", text)
    text = ITALIC_PATTERN.sub(r"\1", text)
    text = CODE_PATTERN.sub(r"\1", text)
    text = TAG_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def first_summary_line(body: str, source_name: str = "<text>") -> str | None:
    """Return the first non-blank line that is not a heading, trimmed."""
    for line in body.split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("#"):
            logger.debug("%s: skipping heading for summary: %s", source_name, stripped)
            continue
        return stripped
    return None


def extract_summary(
    body: str,
    source_name: str = "<text>",
    fallback: str = DEFAULT_SUMMARY,
) -> str:
    raw = first_summary_line(body, source_name)
    if raw is None:
        return fallback
    plain = markdown_to_plain_text(raw)
    logger.debug("%s: summary %r -> %r", source_name, raw, plain)
    return plain

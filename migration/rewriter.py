"""Rewrite asset references and headings in a post body for the bundle layout.

Old posts reference media by absolute site paths such as
``/images/posts/<dir_name>/4/img1_1.png``. In the new layout each post is a
page bundle, so references become relative to ``<dir_name>/``:

  /images/posts/<dir_name>/4/img1_1.png  ->  4/img1_1.png
  /images/posts/other-post/pic.png       ->  pic.png       (copied over)
  /images/posts/pic.png                  ->  pic.png       (copied over)

This is targeted pattern substitution over three constructs (images,
links, ATX headings), not a Markdown parser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger("migration")

DEFAULT_ASSETS_PREFIX = "images/posts"
MAX_HEADING_LEVEL = 6

HEADING_PATTERN = re.compile(r"^(#+) (.*)$", re.MULTILINE)

DIRECT = "direct"
MATCHING = "matching"
MISMATCHED = "mismatched"
UNSAFE = "unsafe"

DOT_SEGMENTS = frozenset({".", ".."})


@dataclass(frozen=True)
class CopyTask:
    """``source`` is relative to the old assets root, ``destination`` to the post bundle."""

    source: str
    destination: str


@dataclass(frozen=True)
class ImagePath:
    relative: str
    kind: str
    segments: tuple[str, ...]


@dataclass
class RewriteResult:
    body: str
    copy_tasks: list[CopyTask] = field(default_factory=list)


def _prefix_group(assets_prefix: str) -> str:
    return f"(?:{re.escape(assets_prefix.strip('/'))}/)?"


def strip_assets_prefix(src: str, assets_prefix: str = DEFAULT_ASSETS_PREFIX) -> str:
    return re.sub(f"^/?{_prefix_group(assets_prefix)}", "", src, count=1)


def has_dot_segment(segments) -> bool:
    return any(seg in DOT_SEGMENTS for seg in segments)


def resolve_image_path(src: str, dir_name: str, assets_prefix: str = DEFAULT_ASSETS_PREFIX) -> ImagePath:
    """Map an image source onto its path inside the ``dir_name`` bundle.

    A bare filename stays as is. A path whose first directory is the post's
    own ``dir_name`` keeps its inner structure. Any other directory cannot
    be trusted, so only the filename is kept. Protocol-relative URLs and
    paths with empty, `.` or `..` segments are not bundle paths at all.
    """
    segments = tuple(strip_assets_prefix(src, assets_prefix).split("/"))
    if src.startswith("//") or "" in segments or has_dot_segment(segments):
        return ImagePath(src, UNSAFE, segments)
    if len(segments) == 1:
        return ImagePath(segments[0], DIRECT, segments)
    if segments[0] == dir_name:
        return ImagePath("/".join(segments[1:]), MATCHING, segments)
    return ImagePath(segments[-1], MISMATCHED, segments)


def shift_headings(body: str) -> str:
    """Demote every ATX heading by one level, leaving level 6 alone."""

    def repl(match: re.Match[str]) -> str:
        hashes = match.group(1)
        if len(hashes) < MAX_HEADING_LEVEL:
            hashes += "#"
        return f"{hashes} {match.group(2)}"

    return HEADING_PATTERN.sub(repl, body)


def rewrite_body(
    body: str,
    dir_name: str,
    assets_prefix: str = DEFAULT_ASSETS_PREFIX,
    source_name: str = "<text>",
) -> RewriteResult:
    prefix = _prefix_group(assets_prefix)
    image_pattern = re.compile(rf"!\[(.*?)\]\((/(?!/){prefix}[^)]+)\)")
    link_pattern = re.compile(rf"(?<!!)\[(.*?)\]\((/(?!/){prefix}[^)]+)\)")
    link_strip_pattern = re.compile(rf"^/?{prefix}[^/]*/")
    copy_tasks: list[CopyTask] = []

    def image_repl(match: re.Match[str]) -> str:
        alt, src = match.groups()
        resolved = resolve_image_path(src, dir_name, assets_prefix)
        if resolved.kind == UNSAFE:
            logger.warning("%s: image %s is not a site asset path, left unchanged", source_name, src)
            return match.group(0)
        if resolved.kind == DIRECT:
            logger.warning(
                "%s: image %s sits directly under the assets root instead of a post directory",
                source_name,
                src,
            )
            copy_tasks.append(CopyTask(resolved.segments[0], resolved.relative))
        elif resolved.kind == MISMATCHED:
            logger.warning(
                "%s: image %s is under %s (expected %s)",
                source_name,
                src,
                resolved.segments[0],
                dir_name,
            )
            copy_tasks.append(CopyTask("/".join(resolved.segments), resolved.relative))
        logger.debug("%s: image %s -> %s", source_name, src, resolved.relative)
        return f"![{alt}]({resolved.relative})"

    def link_repl(match: re.Match[str]) -> str:
        text, src = match.groups()
        if has_dot_segment(src.split("/")):
            logger.warning("%s: link %s has relative segments, left unchanged", source_name, src)
            return match.group(0)
        relative = link_strip_pattern.sub("", src, count=1)
        logger.debug("%s: link %s -> %s", source_name, src, relative)
        return f"[{text}]({relative})"

    rewritten = image_pattern.sub(image_repl, body)
    rewritten = link_pattern.sub(link_repl, rewritten)
    rewritten = shift_headings(rewritten)
    return RewriteResult(body=rewritten, copy_tasks=copy_tasks)


def find_first_image(
    body: str,
    dir_name: str,
    assets_prefix: str = DEFAULT_ASSETS_PREFIX,
) -> str | None:
    """Return the bundle-relative path of the first image in ``body``, if any."""
    pattern = re.compile(rf"!\[.*?\]\((?!//)(/?{_prefix_group(assets_prefix)}[^)]+)\)")
    match = pattern.search(body)
    if not match:
        return None
    resolved = resolve_image_path(match.group(1), dir_name, assets_prefix)
    if resolved.kind == UNSAFE:
        return None
    return resolved.relative

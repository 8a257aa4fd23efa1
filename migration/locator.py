"""Find the old asset directory of a post.

Most posts keep their media in ``<images_root>/<dir_name>/``. Some only
reveal the directory through the ``image`` front matter field, e.g.
``/images/posts/2013-03-12-computer-graphics/4/img1_1.png``. Resolvers
are tried in ``RESOLVERS`` order and the first hit wins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from migration.rewriter import DEFAULT_ASSETS_PREFIX, DOT_SEGMENTS, strip_assets_prefix

logger = logging.getLogger("migration")

Resolver = Callable[..., Path | None]


def by_dir_name(
    dir_name: str,
    source_image: Any,
    images_root: Path,
    assets_prefix: str,
    source_name: str,
) -> Path | None:
    candidate = images_root / dir_name
    logger.debug("%s: checking asset directory %s", source_name, candidate)
    if candidate.is_dir():
        return candidate
    logger.debug("%s: no asset directory at %s", source_name, candidate)
    return None


def by_image_field(
    dir_name: str,
    source_image: Any,
    images_root: Path,
    assets_prefix: str,
    source_name: str,
) -> Path | None:
    if not isinstance(source_image, str) or not source_image.strip():
        logger.debug("%s: no image field to derive an asset directory from", source_name)
        return None

    segments = strip_assets_prefix(source_image.strip(), assets_prefix).split("/")
    if len(segments) == 1:
        logger.warning(
            "%s: image %s sits directly in %s instead of a post directory",
            source_name,
            source_image,
            images_root,
        )
        return None

    if source_image.strip().startswith("//") or segments[0] in DOT_SEGMENTS or not segments[0]:
        logger.warning(
            "%s: image %s does not name an asset directory, skipping",
            source_name,
            source_image,
        )
        return None

    candidate = images_root / segments[0]
    logger.debug("%s: trying asset directory derived from image field: %s", source_name, candidate)
    if candidate.is_dir():
        return candidate
    logger.debug("%s: derived asset directory %s does not exist", source_name, candidate)
    return None


RESOLVERS: tuple[Resolver, ...] = (by_dir_name, by_image_field)


def locate_asset_dir(
    dir_name: str,
    source_image: Any,
    images_root: Path,
    assets_prefix: str = DEFAULT_ASSETS_PREFIX,
    source_name: str = "<text>",
    resolvers: tuple[Resolver, ...] = RESOLVERS,
) -> Path | None:
    for resolver in resolvers:
        found = resolver(dir_name, source_image, images_root, assets_prefix, source_name)
        if found is not None:
            return found
    logger.info("%s: no asset directory found for %s, skipping asset copy", source_name, dir_name)
    return None

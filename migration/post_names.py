"""Derive the slug and bundle directory name of a post from its filename."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import PurePath

DATE_PREFIX_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}-")


@dataclass(frozen=True)
class PostNames:
    """`dir_name` keeps the date prefix; `slug` drops it."""

    slug: str
    dir_name: str


def names_from_filename(filename: str) -> PostNames:
    dir_name = PurePath(filename).stem
    slug = DATE_PREFIX_PATTERN.sub("", dir_name)
    return PostNames(slug=slug, dir_name=dir_name)

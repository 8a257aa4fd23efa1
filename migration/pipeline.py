"""Migrate old single-file posts into page bundles for the new theme.

For every Markdown file in the old content directory:

  1. split the front matter (TOML or YAML) from the body
  2. normalize the metadata, falling back to filename defaults
  3. rewrite image/link paths and demote headings
  4. copy individually referenced images into the bundle
  5. write ``<new_content>/<dir_name>/index.md`` with YAML front matter
  6. mirror the post's old asset directory into the bundle

A failure in any step is logged and only that post is skipped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from migration import config_utils
from migration.front_matter import split_document
from migration.locator import locate_asset_dir
from migration.metadata import (
    DEFAULT_AUTHORS,
    PostMetadata,
    normalize_metadata,
    select_featured_image,
)
from migration.post_names import PostNames, names_from_filename
from migration.relocator import (
    DEFAULT_ASSET_EXTENSIONS,
    RelocationReport,
    mirror_assets,
    run_copy_tasks,
)
from migration.rewriter import DEFAULT_ASSETS_PREFIX, rewrite_body
from migration.summary import DEFAULT_SUMMARY, extract_summary

logger = logging.getLogger("migration")

DEFAULT_MARKDOWN_EXTENSIONS = (".md", ".markdown")
DEFAULT_OUTPUT_FILENAME = "index.md"


@dataclass
class MigrationSettings:
    source_dir: Path
    images_dir: Path
    dest_dir: Path
    assets_prefix: str = DEFAULT_ASSETS_PREFIX
    asset_extensions: tuple[str, ...] = tuple(sorted(DEFAULT_ASSET_EXTENSIONS))
    markdown_extensions: tuple[str, ...] = DEFAULT_MARKDOWN_EXTENSIONS
    default_authors: tuple[str, ...] = DEFAULT_AUTHORS
    summary_fallback: str = DEFAULT_SUMMARY
    output_filename: str = DEFAULT_OUTPUT_FILENAME

    @classmethod
    def from_config(
        cls,
        source_dir: Path | None = None,
        images_dir: Path | None = None,
        dest_dir: Path | None = None,
    ) -> MigrationSettings:
        """Read migrate.yaml (and config/local.yaml); explicit directories win."""
        get = config_utils.get_value
        return cls(
            source_dir=source_dir or config_utils.get_path("old_content"),
            images_dir=images_dir or config_utils.get_path("old_images"),
            dest_dir=dest_dir or config_utils.get_path("new_content"),
            assets_prefix=get("migration.assets_prefix", DEFAULT_ASSETS_PREFIX),
            asset_extensions=tuple(
                ext.lower() for ext in get("migration.asset_extensions", sorted(DEFAULT_ASSET_EXTENSIONS))
            ),
            markdown_extensions=tuple(
                ext.lower() for ext in get("migration.markdown_extensions", DEFAULT_MARKDOWN_EXTENSIONS)
            ),
            default_authors=tuple(get("migration.default_authors", DEFAULT_AUTHORS)),
            summary_fallback=get("migration.summary_fallback", DEFAULT_SUMMARY),
            output_filename=get("migration.output_filename", DEFAULT_OUTPUT_FILENAME),
        )


@dataclass
class PostResult:
    name: str
    ok: bool
    error: str | None = None
    output_path: Path | None = None
    assets: RelocationReport = field(default_factory=RelocationReport)


@dataclass
class MigrationReport:
    results: list[PostResult] = field(default_factory=list)
    fatal_error: str | None = None

    @property
    def succeeded(self) -> list[PostResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[PostResult]:
        return [r for r in self.results if not r.ok]


def compose_document(front_matter: dict[str, Any], body: str) -> str:
    dumped = yaml.safe_dump(
        front_matter,
        allow_unicode=True,
        sort_keys=False,
        default_flow_style=False,
        width=float("inf"),
    )
    return f"---\n{dumped}---\n\n{body}"


def build_metadata(
    content: str,
    names: PostNames,
    filename: str,
    settings: MigrationSettings,
    now: str | None = None,
) -> tuple[PostMetadata, str]:
    """Return the normalized metadata and the original body of one post."""
    split = split_document(content, filename)
    metadata = normalize_metadata(
        split.front_matter,
        names,
        now=now,
        default_authors=settings.default_authors,
        source_name=filename,
    )
    metadata.summary = extract_summary(split.body, filename, settings.summary_fallback)
    metadata.image = select_featured_image(
        metadata.source_image,
        split.body,
        names.dir_name,
        settings.assets_prefix,
        filename,
    )
    return metadata, split.body


def migrate_post(md_path: Path, settings: MigrationSettings, now: str | None = None) -> PostResult:
    """Migrate one post; never raises."""
    filename = md_path.name
    try:
        content = md_path.read_text(encoding="utf-8")
        logger.debug("%s: first lines:\n%s", filename, "\n".join(content.split("\n")[:10]))

        names = names_from_filename(filename)
        metadata, body = build_metadata(content, names, filename, settings, now)
        rewritten = rewrite_body(body, names.dir_name, settings.assets_prefix, filename)

        post_dir = settings.dest_dir / names.dir_name
        assets = run_copy_tasks(
            rewritten.copy_tasks,
            settings.images_dir,
            post_dir,
            settings.asset_extensions,
            filename,
        )

        post_dir.mkdir(parents=True, exist_ok=True)
        output_path = post_dir / settings.output_filename
        output_path.write_text(
            compose_document(metadata.to_front_matter(), rewritten.body),
            encoding="utf-8",
        )

        asset_dir = locate_asset_dir(
            names.dir_name,
            metadata.source_image,
            settings.images_dir,
            settings.assets_prefix,
            filename,
        )
        if asset_dir is not None:
            assets.merge(mirror_assets(asset_dir, post_dir, settings.asset_extensions))
    except Exception as exc:
        logger.error("Error processing %s: %s", filename, exc)
        return PostResult(name=filename, ok=False, error=str(exc))

    logger.info("Successfully processed: %s", filename)
    return PostResult(name=filename, ok=True, output_path=output_path, assets=assets)


def discover_posts(source_dir: Path, extensions: tuple[str, ...]) -> list[Path]:
    """List Markdown files directly inside ``source_dir``; raises OSError if unreadable."""
    wanted = {ext.lower() for ext in extensions}
    return sorted(
        entry for entry in source_dir.iterdir() if entry.is_file() and entry.suffix.lower() in wanted
    )


def run_migration(settings: MigrationSettings, now: str | None = None) -> MigrationReport:
    report = MigrationReport()
    try:
        posts = discover_posts(settings.source_dir, settings.markdown_extensions)
    except OSError as exc:
        logger.error("Error during migration: cannot read %s: %s", settings.source_dir, exc)
        report.fatal_error = str(exc)
        return report

    if not posts:
        logger.warning("No Markdown files found in %s", settings.source_dir)

    for md_path in posts:
        report.results.append(migrate_post(md_path, settings, now))

    logger.info(
        "Migration completed: %d succeeded, %d failed",
        len(report.succeeded),
        len(report.failed),
    )
    return report

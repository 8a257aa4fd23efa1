#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""이전 Hugo 테마의 글(content/post/*.md)을 새 테마의 페이지 번들로 옮깁니다."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from migration.pipeline import MigrationSettings, run_migration


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """명령줄 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--source-dir", type=Path, help="Old post directory (default: config paths.old_content)")
    parser.add_argument("--images-dir", type=Path, help="Old image root (default: config paths.old_images)")
    parser.add_argument("--dest-dir", type=Path, help="New post directory (default: config paths.new_content)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Show debug output")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only show warnings and errors")
    return parser.parse_args(argv)


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        settings = MigrationSettings.from_config(
            source_dir=args.source_dir.resolve() if args.source_dir else None,
            images_dir=args.images_dir.resolve() if args.images_dir else None,
            dest_dir=args.dest_dir.resolve() if args.dest_dir else None,
        )
    except KeyError as exc:
        print(f"설정이 부족합니다: {exc}", file=sys.stderr)
        return 1

    report = run_migration(settings)
    if report.fatal_error:
        print(f"마이그레이션 중단: {report.fatal_error}", file=sys.stderr)
        return 1

    print(f"마이그레이션 완료: 성공 {len(report.succeeded)}개, 실패 {len(report.failed)}개")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

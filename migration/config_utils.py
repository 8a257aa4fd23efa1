#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""마이그레이션 설정(configuration)을 불러오기 위한 유틸리티 헬퍼 함수들."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any

import yaml

# 이 파일의 상위 디렉터리(프로젝트 루트)를 ROOT 경로로 설정합니다.
ROOT = Path(__file__).resolve().parents[1]
# 기본 설정 파일의 경로를 지정합니다.
BASE_CONFIG_PATH = ROOT / "migrate.yaml"
# 로컬 환경에 맞춘 경로 등을 덮어쓰는 설정 파일 후보들입니다.
LOCAL_CONFIG_CANDIDATES = [
    ROOT / "config" / "local.yaml",
]


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    두 개의 딕셔너리를 재귀적으로 병합합니다.
    - `override` 값이 `base` 값을 덮어쓰고, 양쪽 모두 딕셔너리인 키는 하위까지 병합합니다.
    """
    merged = dict(base)
    for key, override_value in override.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(override_value, dict):
            merged[key] = _deep_merge(base_value, override_value)
        else:
            merged[key] = override_value
    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level mapping expected, got {type(data).__name__}")
    return data


def load_files(base_path: Path, overrides: list[Path]) -> dict[str, Any]:
    """`base_path`를 읽고 존재하는 `overrides` 파일들을 순서대로 덮어씁니다."""
    config = _read_yaml(base_path)
    for cfg_path in overrides:
        config = _deep_merge(config, _read_yaml(cfg_path))
    return config


@functools.lru_cache(maxsize=1)
def load_config() -> dict[str, Any]:
    """
    기본 설정 파일(migrate.yaml)과 로컬 설정 파일을 병합한 최종 설정을 반환합니다.
    - 결과는 캐싱되므로 파일은 프로세스당 한 번만 읽습니다.
    """
    return load_files(BASE_CONFIG_PATH, LOCAL_CONFIG_CANDIDATES)


def get_path(key: str) -> Path:
    """설정의 'paths' 항목에서 `key`에 해당하는 경로를 절대 경로로 반환합니다."""
    config = load_config()
    paths = config.get("paths", {}) or {}
    value = paths.get(key)
    if value is None:
        raise KeyError(f"paths.{key} is not configured")
    return (ROOT / value).resolve()


def get_value(path: str, default: Any = None) -> Any:
    """
    점(.)으로 구분된 경로로 설정 값을 가져옵니다.
    - 예: `get_value("migration.assets_prefix")`
    - 경로가 존재하지 않으면 `default` 값을 반환합니다.
    """
    config = load_config()
    node: Any = config
    for part in path.split("."):
        if isinstance(node, dict) and part in node:
            node = node[part]
        else:
            return default
    return node

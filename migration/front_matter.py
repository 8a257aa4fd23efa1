"""Split a Markdown document into its front matter block and body.

Two delimiters are recognised and each selects an encoding:

  +++  TOML (the old Hugo theme)
  ---  YAML

Decoding goes through ``DECODERS`` so callers never branch on the
delimiter themselves.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import toml
import yaml

logger = logging.getLogger("migration")

BOM = "\ufeff"


class Encoding(str, enum.Enum):
    TOML = "TOML"
    YAML = "YAML"


DELIMITERS: dict[str, Encoding] = {
    "+++": Encoding.TOML,
    "---": Encoding.YAML,
}

DECODERS: dict[Encoding, Callable[[str], Any]] = {
    Encoding.TOML: toml.loads,
    Encoding.YAML: yaml.safe_load,
}


class FrontMatterError(ValueError):
    """Raised when a front matter block cannot be decoded into a mapping."""

    def __init__(self, encoding: Encoding, message: str) -> None:
        super().__init__(f"{encoding.value}: {message}")
        self.encoding = encoding


@dataclass(frozen=True)
class FrontMatter:
    text: str
    encoding: Encoding


@dataclass
class SplitResult:
    front_matter: FrontMatter | None
    body: str
    anomalies: list[str] = field(default_factory=list)


def split_document(content: str, source_name: str = "<text>") -> SplitResult:
    """Return the front matter (or None) and the body of ``content``.

    The opening delimiter must be the first non-blank line. Inside the
    block only the delimiter that opened it closes it; the other one is
    kept as data and reported. An unclosed block means the document has
    no front matter at all.
    """
    if content.startswith(BOM):
        content = content.lstrip(BOM)

    lines = content.split("\n")
    start = 0
    while start < len(lines) and not lines[start].strip():
        start += 1

    if start == len(lines) or lines[start].strip() not in DELIMITERS:
        logger.debug("%s: no front matter delimiter on the first line", source_name)
        return SplitResult(front_matter=None, body=content)

    delimiter = lines[start].strip()
    logger.debug("%s: detected delimiter %s", source_name, delimiter)

    anomalies: list[str] = []
    block: list[str] = []
    for idx in range(start + 1, len(lines)):
        line = lines[idx]
        stripped = line.strip()
        if stripped == delimiter:
            encoding = DELIMITERS[delimiter]
            logger.debug("%s: front matter encoding is %s", source_name, encoding.value)
            return SplitResult(
                front_matter=FrontMatter("\n".join(block) + "\n", encoding),
                body="\n".join(lines[idx + 1 :]),
                anomalies=anomalies,
            )
        if stripped in DELIMITERS:
            message = f"mismatched delimiter: expected {delimiter}, got {stripped}"
            logger.warning("%s: %s", source_name, message)
            anomalies.append(message)
        block.append(line)

    message = f"front matter opened with {delimiter} is never closed"
    logger.warning("%s: %s", source_name, message)
    anomalies.append(message)
    return SplitResult(front_matter=None, body=content, anomalies=anomalies)


def decode_front_matter(front_matter: FrontMatter) -> dict[str, Any]:
    """Decode ``front_matter`` with the decoder registered for its encoding.

    An empty block decodes to an empty mapping; anything that is not a
    mapping raises :class:`FrontMatterError`.
    """
    decoder = DECODERS[front_matter.encoding]
    try:
        data = decoder(front_matter.text)
    except (yaml.YAMLError, ValueError, TypeError, IndexError) as exc:
        raise FrontMatterError(front_matter.encoding, str(exc)) from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            front_matter.encoding,
            f"expected a mapping, got {type(data).__name__}",
        )
    return data

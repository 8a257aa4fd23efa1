import datetime as dt
import logging

import pytest

from migration.front_matter import (
    Encoding,
    FrontMatter,
    FrontMatterError,
    decode_front_matter,
    split_document,
)


TOML_POST = """+++
title = "Computer Graphics"
date = 2013-03-12T10:00:00+09:00
tags = ["cg", "opengl"]
+++

# Intro

Body text.
"""

YAML_POST = """---
title: Raymarching
tags: [glsl]
---
Hello
---
after a rule
"""


def test_toml_block_is_detected():
    result = split_document(TOML_POST)
    assert result.front_matter is not None
    assert result.front_matter.encoding is Encoding.TOML
    assert result.front_matter.text.startswith('title = "Computer Graphics"\n')
    assert result.front_matter.text.endswith("\n")
    assert result.body == "\n# Intro\n\nBody text.\n"
    assert result.anomalies == []


def test_yaml_block_closes_on_first_matching_delimiter():
    result = split_document(YAML_POST)
    assert result.front_matter.encoding is Encoding.YAML
    assert result.front_matter.text == "title: Raymarching\ntags: [glsl]\n"
    assert result.body == "Hello\n---\nafter a rule\n"


def test_other_delimiter_inside_block_is_data(caplog):
    text = "+++\ntitle = 'x'\n---\n+++\nbody"
    with caplog.at_level(logging.WARNING, logger="migration"):
        result = split_document(text, "post.md")
    assert result.front_matter.encoding is Encoding.TOML
    assert result.front_matter.text == "title = 'x'\n---\n"
    assert result.body == "body"
    assert len(result.anomalies) == 1
    assert "mismatched delimiter" in caplog.text
    assert "post.md" in caplog.text


def test_no_delimiter_means_whole_text_is_body():
    text = "# Title\n\nJust text.\n"
    result = split_document(text)
    assert result.front_matter is None
    assert result.body == text


def test_horizontal_rule_after_text_is_not_front_matter():
    text = "Intro\n---\nmore\n---\n"
    result = split_document(text)
    assert result.front_matter is None
    assert result.body == text


def test_leading_blank_lines_and_bom_are_skipped():
    text = "\ufeff\n\n---\ntitle: x\n---\nbody"
    result = split_document(text)
    assert result.front_matter.text == "title: x\n"
    assert result.body == "body"


def test_unclosed_block_is_treated_as_missing():
    text = "---\ntitle: x\nbody without closer\n"
    result = split_document(text)
    assert result.front_matter is None
    assert result.body == text
    assert result.anomalies


def test_decode_toml():
    data = decode_front_matter(split_document(TOML_POST).front_matter)
    assert data["title"] == "Computer Graphics"
    assert data["tags"] == ["cg", "opengl"]
    assert isinstance(data["date"], dt.datetime)


def test_decode_yaml():
    data = decode_front_matter(FrontMatter("title: a\ndraft: true\n", Encoding.YAML))
    assert data == {"title": "a", "draft": True}


def test_decode_empty_block():
    assert decode_front_matter(FrontMatter("\n", Encoding.YAML)) == {}


@pytest.mark.parametrize(
    "front_matter",
    [
        FrontMatter('title = "unterminated\n', Encoding.TOML),
        FrontMatter("title: [unclosed\n", Encoding.YAML),
        FrontMatter("- just\n- a list\n", Encoding.YAML),
    ],
)
def test_decode_failures_raise_front_matter_error(front_matter):
    with pytest.raises(FrontMatterError) as excinfo:
        decode_front_matter(front_matter)
    assert excinfo.value.encoding is front_matter.encoding

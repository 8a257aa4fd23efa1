import logging

from migration.rewriter import (
    CopyTask,
    find_first_image,
    resolve_image_path,
    rewrite_body,
    shift_headings,
)


def test_matching_subdirectory_keeps_inner_path():
    body = "![x](/images/posts/2013-03-12-computer-graphics/4/img1_1.png)"
    result = rewrite_body(body, "2013-03-12-computer-graphics")
    assert result.body == "![x](4/img1_1.png)"
    assert result.copy_tasks == []


def test_mismatched_subdirectory_keeps_filename_and_copies(caplog):
    with caplog.at_level(logging.WARNING, logger="migration"):
        result = rewrite_body("![x](/images/posts/other-post/pic.png)", "2020-01-01-foo", source_name="foo.md")
    assert result.body == "![x](pic.png)"
    assert result.copy_tasks == [CopyTask("other-post/pic.png", "pic.png")]
    assert "foo.md" in caplog.text


def test_bare_filename_under_assets_root(caplog):
    with caplog.at_level(logging.WARNING, logger="migration"):
        result = rewrite_body("![](/images/posts/emsn2.png)", "2016-12-28-emsn")
    assert result.body == "![](emsn2.png)"
    assert result.copy_tasks == [CopyTask("emsn2.png", "emsn2.png")]
    assert "directly under the assets root" in caplog.text


def test_relative_and_remote_images_are_untouched():
    body = "![a](pic.png) ![b](https://example.com/x.png)"
    assert rewrite_body(body, "post").body == body


def test_links_drop_prefix_and_first_segment():
    body = "[slides](/images/posts/2019-05-01-talk/deck/slides.pdf)"
    result = rewrite_body(body, "2019-05-01-talk")
    assert result.body == "[slides](deck/slides.pdf)"
    assert result.copy_tasks == []


def test_image_inside_link():
    body = "[![t](/images/posts/p/a.png)](/images/posts/p/a.png)"
    assert rewrite_body(body, "p").body == "[![t](a.png)](a.png)"


def test_custom_assets_prefix():
    result = rewrite_body("![x](/static/img/post-1/a.jpg)", "post-1", assets_prefix="static/img")
    assert result.body == "![x](a.jpg)"


def test_heading_shift():
    assert shift_headings("# A") == "## A"
    assert shift_headings("###### Z") == "###### Z"
    assert shift_headings("text\n## B\n#nospace") == "text\n### B\n#nospace"


def test_rewrite_body_shifts_headings():
    result = rewrite_body("# Title\n\n![x](/images/posts/p/a.png)\n", "p")
    assert result.body == "## Title\n\n![x](a.png)\n"


def test_resolve_image_path_kinds():
    assert resolve_image_path("/images/posts/p/4/a.png", "p").kind == "matching"
    assert resolve_image_path("/images/posts/q/a.png", "p").kind == "mismatched"
    assert resolve_image_path("a.png", "p").kind == "direct"


def test_find_first_image():
    body = "text\n![one](/images/posts/p/sub/one.png)\n![two](/images/posts/p/two.png)"
    assert find_first_image(body, "p") == "sub/one.png"
    assert find_first_image("no images", "p") is None


def test_protocol_relative_image_is_left_alone(caplog):
    body = "![logo](//cdn.example.com/logo.png)"
    with caplog.at_level(logging.WARNING, logger="migration"):
        result = rewrite_body(body, "2020-01-01-foo")
    assert result.body == body
    assert result.copy_tasks == []


def test_protocol_relative_link_is_left_alone():
    body = "[cdn](//cdn.example.com/file.zip)"
    assert rewrite_body(body, "2020-01-01-foo").body == body


def test_dot_segments_do_not_escape_assets_root(caplog):
    body = "![x](/images/posts/../../etc/secret.png)"
    with caplog.at_level(logging.WARNING, logger="migration"):
        result = rewrite_body(body, "p", source_name="p.md")
    assert result.body == body
    assert result.copy_tasks == []
    assert "left unchanged" in caplog.text


def test_link_with_parent_segment_is_left_alone():
    body = "[doc](/images/posts/p/../other/doc.pdf)"
    assert rewrite_body(body, "p").body == body


def test_first_image_skips_protocol_relative():
    assert find_first_image("![a](//cdn.example.com/a.png)", "p") is None
    assert resolve_image_path("//cdn.example.com/a.png", "p").kind == "unsafe"

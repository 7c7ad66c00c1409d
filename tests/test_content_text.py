import pytest

from office_hours_export.content_text import find_page_links, normalize_lines, normalize_text


SAMPLES = [
    "",
    "plain text",
    "<p><strong>Jane Doe (Instructor)</strong><br>Office Hours:<br>Monday: 2:00-3:00 in Room 101</p>",
    "<div>\n\n\n<p>  spaced&nbsp;&nbsp;out  </p>\n\n</div>",
    "<<b>>nested<</b>>",
    "a < b and c > d",
    "&amp;nbsp; stays &lt;b&gt;",
    "<script>var x = '<p>';</script><p>after script</p>",
    "<!-- comment --><p>kept</p>",
    "line one\r\nline two\rline three",
]


def test_strips_tags_into_lines():
    html = "<p><strong>Jane Doe (Instructor)</strong><br>Office Hours:<br>Monday: 2:00-3:00 in Room 101</p>"
    assert normalize_lines(html) == [
        "Jane Doe (Instructor)",
        "Office Hours:",
        "Monday: 2:00-3:00 in Room 101",
    ]


def test_whitespace_entities_and_blank_lines():
    html = "<div>\n\n\n<p>  spaced&nbsp;&nbsp;out  </p>\n\n<p> </p></div>"
    assert normalize_lines(html) == ["spaced out"]


def test_other_entities_are_left_alone():
    assert normalize_lines("Q&amp;A &lt;3") == ["Q&amp;A &lt;3"]


def test_escaped_markup_never_becomes_tags():
    raw = "&lt;b&gt;Room 101&lt;/b&gt;&nbsp;A&amp;B"
    once = normalize_lines(raw)
    assert once == ["&lt;b&gt;Room 101&lt;/b&gt; A&amp;B"]
    assert normalize_lines("\n".join(once)) == once


def test_script_and_comments_dropped():
    assert normalize_lines("<script>var x = 1;</script><!-- hi --><p>kept</p>") == ["kept"]


def test_empty_and_none():
    assert normalize_lines("") == []
    assert normalize_lines(None) == []
    assert normalize_text(None) == ""


@pytest.mark.parametrize("raw", SAMPLES)
def test_idempotent(raw):
    once = normalize_text(raw)
    assert normalize_text(once) == once


def test_find_page_links():
    html = """
    <p>See the <a href="/courses/42/pages/syllabus">syllabus</a>,
    <a href="https://canvas.example.edu/courses/42/pages/office%20hours?module_item_id=7">hours</a>,
    <a href="/courses/42/pages/syllabus#top">again</a> and
    <a href="/courses/42/files/9">a file</a>.</p>
    """
    assert find_page_links(html) == ["syllabus", "office hours"]


def test_find_page_links_empty():
    assert find_page_links("") == []
    assert find_page_links("<p>no links</p>") == []

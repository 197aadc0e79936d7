import pytest

from metaview.view.cleaner import clean


def test_parenthesized_link_field_is_removed() -> None:
    result = clean("foo (status:: [[Done]]) bar")

    assert "::" not in result
    assert result == "foo bar"


def test_metadata_only_line_yields_empty_string() -> None:
    assert clean("due:: 2024-01-01") == ""


@pytest.mark.parametrize(
    "text",
    ["%% hidden %% and more", "%%", "  %% indented comment"],
)
def test_comment_lines_contribute_nothing(text: str) -> None:
    assert clean(text) == ""


def test_comment_line_among_other_lines() -> None:
    assert clean("keep this\n%% but not this\nand this") == "keep this and this"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Call [with:: [[Ada]]] today", "Call today"),
        ("Call (with:: [[Ada|Lovelace]]) today", "Call today"),
        ("Read [source:: see [docs](https://example.org)] later", "Read later"),
        ("Ship [due:: 2024-05-01] soon", "Ship soon"),
        ("Fix (prio::high) bug", "Fix bug"),
        ("Met Ada mood:: great today", "Met Ada today"),
        ("Met [[Ada]] at [place:: Cafe Nero]", "Met [[Ada]] at"),
    ],
)
def test_each_inline_field_form_is_removed(text: str, expected: str) -> None:
    assert clean(text) == expected


def test_word_order_and_untouched_whitespace_are_preserved() -> None:
    assert clean("a  b [k:: v] c") == "a  b c"


def test_lines_are_joined_with_single_spaces() -> None:
    assert clean("first line\n  second line\nk:: v\n") == "first line second line"


def test_line_emptied_by_removals_is_dropped() -> None:
    assert clean("text\n[a:: 1] (b::2)\nmore") == "text more"


def test_malformed_tokens_are_best_effort() -> None:
    result = clean("[open:: never closed")
    assert "closed" in result
    assert "::" not in result


def test_missing_text() -> None:
    assert clean(None) == ""
    assert clean("") == ""


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("foo(k::v)bar", "foobar"),
        ("foo[due:: soon]bar", "foobar"),
        ("foo [due:: soon]bar", "foo bar"),
        ("foo(k::v) bar", "foo bar"),
    ],
)
def test_removal_adds_no_whitespace_of_its_own(text: str, expected: str) -> None:
    assert clean(text) == expected

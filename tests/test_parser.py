"""Tests for markdown parsing of links, tags, inline fields and list items."""

from metaview.models import StructuredLink
from metaview.vault.parser import (
    collect_fields,
    extract_inline_fields,
    extract_outlinks,
    extract_tags,
    frontmatter_tags,
    parse_field_value,
    parse_list_items,
)

BODY = """# Meetings
- Met (with:: [[B]]) today
  continued line
    - child note #idea
- [x] task done [due:: 2024-05-01]

Paragraph text
- after paragraph"""


def test_list_items_are_parsed_with_structure() -> None:
    items = parse_list_items(BODY, "Log.md")

    assert [item.line for item in items] == [1, 3, 4, 7]
    first, child, task, last = items

    assert first.text == "Met (with:: [[B]]) today\ncontinued line"
    assert first.line_count == 2
    assert first.section == "Meetings"
    assert first.link == StructuredLink(path="Log.md", subpath="Meetings")
    assert first.outlinks == [StructuredLink(path="B.md")]
    assert first.fields == {"with": StructuredLink(path="B.md")}
    assert first.children == [child]

    assert child.parent == 1
    assert child.tags == ["#idea"]

    assert task.task
    assert task.status == "x"
    assert task.parent is None
    assert task.fields == {"due": "2024-05-01"}

    assert last.parent is None
    assert last.section == "Meetings"
    assert not last.task


def test_list_items_inside_code_fences_are_ignored() -> None:
    items = parse_list_items("```\n- not an item\n```\n- real item", "Log.md")

    assert [item.text for item in items] == ["real item"]
    assert items[0].line == 3


def test_numbered_items_keep_their_symbol() -> None:
    items = parse_list_items("1. first\n2) second", "Log.md")
    assert [item.symbol for item in items] == ["1.", "2)"]


def test_line_field_consumes_the_whole_line() -> None:
    assert extract_inline_fields("mood:: great [x:: y]") == [("mood", "great [x:: y]")]


def test_inline_fields_in_order_of_appearance() -> None:
    fields = extract_inline_fields("x (b:: 2) [a:: 1]\nc:: 3")
    assert fields == [("b", "2"), ("a", "1"), ("c", "3")]


def test_repeated_keys_collect_a_list() -> None:
    assert collect_fields("x [with:: A] (with:: B)") == {"with": ["A", "B"]}


def test_link_only_values_become_links() -> None:
    assert parse_field_value("[[A]]") == StructuredLink(path="A.md")
    assert parse_field_value("[[A]], [[B]]") == [StructuredLink(path="A.md"), StructuredLink(path="B.md")]
    assert parse_field_value(" see [[A]] ") == "see [[A]]"


def test_extract_tags() -> None:
    tags = extract_tags("#a text #b/c #123 x#no `#code` #A")
    assert tags == ["#a", "#b/c"]


def test_extract_tags_ignores_headings() -> None:
    assert extract_tags("# Heading\n## Sub") == []


def test_outlinks_include_local_markdown_links() -> None:
    content = "see [doc](Folder/Note%20One.md#Part) and [web](https://x.org) and [[Z]]"

    links = extract_outlinks(content)

    assert links == [
        StructuredLink(path="Folder/Note One.md", subpath="Part"),
        StructuredLink(path="Z.md"),
    ]


def test_outlinks_are_deduplicated_and_skip_code() -> None:
    links = extract_outlinks("[[A]] and [[A|again]] `[[C]]` ![[img.png]]")

    assert links == [
        StructuredLink(path="A.md"),
        StructuredLink(path="img.png", embed=True),
    ]


def test_outlinks_use_the_resolver() -> None:
    def resolve(target: str) -> str:
        return {"Ada": "people/Ada.md"}.get(target, f"{target}.md")

    links = extract_outlinks("[[Ada]] [[Ada|Countess]]", resolve)

    assert links == [StructuredLink(path="people/Ada.md", display="Ada")]


def test_frontmatter_tags() -> None:
    assert frontmatter_tags({"tags": "one, #two three"}) == ["#one", "#two", "#three"]
    assert frontmatter_tags({"tags": ["x", None, "#y"]}) == ["#x", "#y"]
    assert frontmatter_tags({}) == []

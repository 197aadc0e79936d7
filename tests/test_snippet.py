import pytest

from metaview.snippet import TitleSnippet, parse_title_snippet


def test_trigger_title_and_metadata() -> None:
    snippet = parse_title_snippet("P;Jane Smith &role=designer &team=core", prefix="People/")

    assert snippet == TitleSnippet(
        trigger="p",
        clean="Jane Smith",
        full="People/Jane Smith",
        rename_to="Jane Smith",
        metadata={"role": "designer", "team": "core"},
    )


def test_params_anywhere_in_the_string() -> None:
    snippet = parse_title_snippet("&due=friday m ; Weekly sync")

    assert snippet.trigger == "m"
    assert snippet.clean == "Weekly sync"
    assert snippet.metadata == {"due": "friday"}


def test_only_the_first_separator_splits() -> None:
    snippet = parse_title_snippet("t;one;two")
    assert snippet.trigger == "t"
    assert snippet.clean == "one;two"


def test_empty_trigger_falls_back_to_default() -> None:
    snippet = parse_title_snippet(";Just a title")
    assert snippet.trigger == "default"
    assert snippet.clean == "Just a title"


def test_without_separator_everything_is_the_trigger() -> None:
    snippet = parse_title_snippet("Inbox")
    assert snippet.trigger == "inbox"
    assert snippet.clean == ""


@pytest.mark.parametrize("msg", [None, 42, ["p;x"]])
def test_non_string_input_gives_default(msg) -> None:
    assert parse_title_snippet(msg) == TitleSnippet()


def test_to_dict_uses_rename_to_key() -> None:
    data = parse_title_snippet("p;Ada").to_dict()
    assert data == {"trigger": "p", "clean": "Ada", "full": "Ada", "renameTo": "Ada", "metadata": {}}

"""Tokenizer behaviour: shell quoting, escapes and parse failures."""

from __future__ import annotations

import pytest

from mcerv.shell.error_model import ParseError
from mcerv.shell.tokenizer import ends_with_whitespace, join, replace_offset, tokenize


def test_tokenize_splits_on_whitespace() -> None:
    assert tokenize("add server  my-server --game 1.21") == ["add", "server", "my-server", "--game", "1.21"]


def test_tokenize_groups_quotes_and_escapes() -> None:
    assert tokenize('search mods "fabric api"') == ["search", "mods", "fabric api"]
    assert tokenize("set java '/opt/java 21'") == ["set", "java", "/opt/java 21"]
    assert tokenize(r"set java /opt/java\ 21") == ["set", "java", "/opt/java 21"]


def test_tokenize_empty_line() -> None:
    assert tokenize("") == []
    assert tokenize("   ") == []


def test_unterminated_quote_is_parse_error() -> None:
    with pytest.raises(ParseError) as info:
        tokenize('search mods "fabric')
    assert info.value.kind == ParseError.UNTERMINATED_QUOTE
    assert info.value.message == "failed to parse command"


def test_dangling_escape_is_parse_error() -> None:
    with pytest.raises(ParseError) as info:
        tokenize("select abc\\")
    assert info.value.kind == ParseError.DANGLING_ESCAPE


def test_join_round_trips_plain_tokens() -> None:
    tokens = ["java", "-Xmx4G", "-jar", "server with space.jar", "nogui"]
    assert tokenize(join(tokens)) == tokens


@pytest.mark.parametrize(
    "tokens",
    [
        ["say", "a;b"],
        ["echo", "$x", "*"],
        ["set", "java", ""],
        ["msg", "it's", 'say "hi"'],
        ["path", "C:\\Program Files\\Java"],
    ],
)
def test_join_quotes_shell_metacharacters(tokens: list[str]) -> None:
    assert tokenize(join(tokens)) == tokens


def test_join_of_tokenized_line_is_stable() -> None:
    for line in ['search mods "fabric api" --limit 5', r"set java /opt/java\ 21", "select ''"]:
        tokens = tokenize(line)
        assert tokenize(join(tokens)) == tokens


def test_replace_offset_points_after_last_whitespace() -> None:
    assert replace_offset("cmd1 su") == 5
    assert replace_offset("cmd1 ") == 5
    assert replace_offset("cm") == 0
    assert replace_offset("") == 0


def test_ends_with_whitespace() -> None:
    assert ends_with_whitespace("cmd1 ")
    assert not ends_with_whitespace("cmd1")
    assert not ends_with_whitespace("")

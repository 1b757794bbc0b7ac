import pytest

from quill.composer.parser import parse_composer_input, parse_mention_queries
from quill.composer.registry import CommandRegistry
from quill.composer.types import DiagnosticCode


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


def _codes(draft) -> list[DiagnosticCode]:
    return [diagnostic.code for diagnostic in draft.diagnostics]


@pytest.mark.parametrize(
    "raw_input",
    ["hello world", "  explain @src/main.ts", "what does a/b mean", "", "   ", "check /help later"],
)
def test_plain_text_has_no_command(registry: CommandRegistry, raw_input: str) -> None:
    draft = parse_composer_input(raw_input, registry)

    assert draft.command is None
    assert not any(code.startswith("CMD_") for code in _codes(draft))


def test_directory_mention_query() -> None:
    queries = parse_mention_queries("summarize @src/components/")

    assert [query.query for query in queries] == ["src/components/"]
    assert queries[0].start == len("summarize ")
    assert queries[0].end == len("summarize @src/components/")


def test_remote_resource_mention_query() -> None:
    queries = parse_mention_queries("inspect @docs:openapi/users")

    assert [query.query for query in queries] == ["docs:openapi/users"]


def test_email_is_not_a_mention() -> None:
    assert parse_mention_queries("email me at a@b.com") == []


def test_mention_after_opening_punctuation() -> None:
    queries = parse_mention_queries("compare (@a.ts,@b.ts)")

    assert [query.query for query in queries] == ["a.ts", "b.ts"]


def test_command_with_args_and_mentions(registry: CommandRegistry) -> None:
    raw_input = "/compact keep @src/app.ts short"
    draft = parse_composer_input(raw_input, registry)

    assert draft.command is not None
    assert draft.command.name == "compact"
    assert draft.command.raw == "/compact"
    assert draft.command.args == ["keep", "@src/app.ts", "short"]
    assert [query.query for query in draft.mention_queries] == ["src/app.ts"]
    assert draft.diagnostics == []
    assert draft.normalized_prompt == raw_input


def test_command_name_is_case_insensitive(registry: CommandRegistry) -> None:
    draft = parse_composer_input("  /HELP", registry)

    assert draft.command is not None
    assert draft.command.name == "help"
    assert draft.command.start == 2
    assert draft.command.end == 7


def test_tokens_cover_the_whole_input(registry: CommandRegistry) -> None:
    raw_input = " /review look at @src/a.ts and @docs/ please"
    draft = parse_composer_input(raw_input, registry)

    assert "".join(token.raw for token in draft.tokens) == raw_input
    cursor = 0
    for token in draft.tokens:
        assert token.start == cursor
        assert raw_input[token.start : token.end] == token.raw
        cursor = token.end
    assert cursor == len(raw_input)
    assert [token.kind for token in draft.tokens] == ["text", "command", "text", "mention", "text", "mention", "text"]


def test_unknown_command(registry: CommandRegistry) -> None:
    draft = parse_composer_input("/nope do it", registry)

    assert draft.command is None
    assert _codes(draft) == [DiagnosticCode.CMD_UNKNOWN]
    assert draft.diagnostics[0].blocking
    assert draft.diagnostics[0].message == 'Unknown command "/nope".'
    assert (draft.diagnostics[0].start, draft.diagnostics[0].end) == (0, 5)


def test_flags_rejected_when_not_allowed(registry: CommandRegistry) -> None:
    draft = parse_composer_input("/review --fast", registry)

    assert draft.command is not None
    assert _codes(draft) == [DiagnosticCode.CMD_UNSUPPORTED_FLAG]


def test_flags_checked_before_arity(registry: CommandRegistry) -> None:
    draft = parse_composer_input("/model -x extra", registry)

    assert _codes(draft) == [DiagnosticCode.CMD_UNSUPPORTED_FLAG]


def test_flags_allowed_for_mcp(registry: CommandRegistry) -> None:
    draft = parse_composer_input("/mcp --verbose", registry)

    assert draft.diagnostics == []
    assert draft.command is not None
    assert draft.command.args == ["--verbose"]


@pytest.mark.parametrize("raw_input", ["/model", "/model a b", "/review now", "/add-dir"])
def test_arity_violations(registry: CommandRegistry, raw_input: str) -> None:
    draft = parse_composer_input(raw_input, registry)

    assert _codes(draft) == [DiagnosticCode.CMD_INVALID_ARGS]
    definition = registry.get(draft.command.name)
    assert definition is not None
    assert definition.syntax in draft.diagnostics[0].message


def test_quoted_arguments_count_once(registry: CommandRegistry) -> None:
    draft = parse_composer_input('/rename "release notes draft"', registry)

    assert draft.diagnostics == []
    assert draft.command is not None
    assert draft.command.args == ["release notes draft"]

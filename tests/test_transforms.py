from quill.composer.transforms import apply_command_suggestion, apply_mention_suggestion


def test_apply_command_suggestion_adds_trailing_space() -> None:
    value, cursor = apply_command_suggestion("/co", "compact", 3)

    assert value == "/compact "
    assert cursor == len("/compact ")


def test_apply_command_suggestion_keeps_remaining_text() -> None:
    value, cursor = apply_command_suggestion("  /re   the diff", "review", 5)

    assert value == "  /review the diff"
    assert cursor == len("  /review ")


def test_apply_mention_suggestion_replaces_active_token() -> None:
    value, cursor = apply_mention_suggestion("check @sr", "src/main/index.ts", 9)

    assert value == "check @src/main/index.ts"
    assert cursor == len(value)


def test_apply_mention_suggestion_keeps_text_after_cursor() -> None:
    value, cursor = apply_mention_suggestion("open @RE and fix", "README.md", 8)

    assert value == "open @README.md and fix"
    assert cursor == len("open @README.md")


def test_apply_mention_suggestion_without_active_token() -> None:
    assert apply_mention_suggestion("no mention", "x", 4) == ("no mention", 4)

import asyncio
from pathlib import Path

import pytest

import quill.mentions.walk as walk_module
from quill.composer.types import MentionType
from quill.mentions.cache import MentionIndexCache
from quill.mentions.coordinator import MentionCoordinator
from quill.mentions.providers import (
    DirectoryMentionProvider,
    FileMentionProvider,
    ImageMentionProvider,
    McpMentionProvider,
    MentionProviderInput,
    parse_mcp_query,
)

WORKSPACE_ID = "ws"


def _touch(root: Path, relative: str, content: str = "") -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    _touch(tmp_path, ".gitignore", "dist/\n*.log\n")
    _touch(tmp_path, "dist/main.js")
    _touch(tmp_path, "src/main.ts")
    _touch(tmp_path, "src/components/Button.tsx")
    _touch(tmp_path, "debug.log")
    _touch(tmp_path, "assets/logo.png")
    _touch(tmp_path, "node_modules/pkg/index.js")
    _touch(tmp_path, ".git/HEAD")
    return tmp_path


def _params(workspace: Path, query: str) -> MentionProviderInput:
    return MentionProviderInput(workspace_id=WORKSPACE_ID, workspace_path=str(workspace), query=query)


def _counting_scans(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    calls: list[str] = []
    scan = walk_module._scan_directory

    def counting(path: str):
        calls.append(path)
        return scan(path)

    monkeypatch.setattr(walk_module, "_scan_directory", counting)
    return calls


@pytest.mark.asyncio
async def test_gitignored_files_are_not_suggested(workspace: Path) -> None:
    coordinator = MentionCoordinator.create()

    suggestions = await coordinator.suggest(WORKSPACE_ID, str(workspace), "dist")

    assert "dist/main.js" not in [suggestion.value for suggestion in suggestions]


@pytest.mark.asyncio
async def test_file_index_skips_ignored_and_hard_ignored(workspace: Path) -> None:
    provider = FileMentionProvider(MentionIndexCache())

    entries = await provider.index(WORKSPACE_ID, str(workspace))
    values = {entry.value for entry in entries}

    assert {"src/main.ts", "src/components/Button.tsx", "assets/logo.png", ".gitignore"} <= values
    assert "dist/main.js" not in values
    assert "debug.log" not in values
    assert not any(value.startswith(("node_modules/", ".git/")) for value in values)
    main = next(entry for entry in entries if entry.value == "src/main.ts")
    assert main.id == "ws:file:src/main.ts"
    assert main.absolute_path == str(workspace / "src" / "main.ts")


@pytest.mark.asyncio
async def test_directory_suggestion_for_trailing_slash(workspace: Path) -> None:
    coordinator = MentionCoordinator.create()

    suggestions = await coordinator.suggest(WORKSPACE_ID, str(workspace), "src/")
    values = [suggestion.value for suggestion in suggestions]

    assert "src/" in values
    assert "src/components/" in values
    assert values[0] == "src/"


@pytest.mark.asyncio
async def test_directory_provider_does_not_apply_gitignore(workspace: Path) -> None:
    provider = DirectoryMentionProvider(MentionIndexCache())

    values = [entry.value for entry in await provider.suggest(_params(workspace, "di"))]

    assert values == ["dist/"]


@pytest.mark.asyncio
async def test_file_suggest_ignores_remote_queries(workspace: Path) -> None:
    provider = FileMentionProvider(MentionIndexCache())

    assert await provider.suggest(_params(workspace, "src:main")) == []


@pytest.mark.asyncio
async def test_suggestions_are_capped(tmp_path: Path) -> None:
    for index in range(30):
        _touch(tmp_path, f"notes/note{index:02d}.md")

    suggestions = await MentionCoordinator.create().suggest(WORKSPACE_ID, str(tmp_path), "note")

    assert len(suggestions) == 20


@pytest.mark.asyncio
async def test_prefix_matches_rank_first(tmp_path: Path) -> None:
    _touch(tmp_path, "lib/readme.md")
    _touch(tmp_path, "README.md")

    provider = FileMentionProvider(MentionIndexCache())
    values = [entry.value for entry in await provider.suggest(_params(tmp_path, "read"))]

    assert values == ["README.md", "lib/readme.md"]


@pytest.mark.asyncio
async def test_file_index_respects_entry_limit(tmp_path: Path) -> None:
    for index in range(10):
        _touch(tmp_path, f"file{index}.txt")

    provider = FileMentionProvider(MentionIndexCache(), max_entries=4)

    assert len(await provider.index(WORKSPACE_ID, str(tmp_path))) == 4


@pytest.mark.asyncio
async def test_image_resolution(workspace: Path) -> None:
    coordinator = MentionCoordinator.create()

    resolution = await coordinator.resolve(WORKSPACE_ID, str(workspace), "assets/logo.png")

    assert resolution.mention is not None
    assert resolution.mention.type is MentionType.IMAGE
    assert resolution.mention.relative_path == "assets/logo.png"
    assert resolution.mention.id == "ws:image:assets/logo.png"


@pytest.mark.asyncio
async def test_image_suggestions_only_include_images(workspace: Path) -> None:
    provider = ImageMentionProvider(FileMentionProvider(MentionIndexCache()))

    values = [entry.value for entry in await provider.suggest(_params(workspace, ""))]

    assert values == ["assets/logo.png"]


@pytest.mark.asyncio
async def test_file_resolution_falls_back_to_index_match(workspace: Path) -> None:
    provider = FileMentionProvider(MentionIndexCache())

    mention = await provider.resolve(_params(workspace, "Button"))

    assert mention is not None
    assert mention.relative_path == "src/components/Button.tsx"


@pytest.mark.asyncio
async def test_directory_resolution(workspace: Path) -> None:
    provider = DirectoryMentionProvider(MentionIndexCache())

    nested = await provider.resolve(_params(workspace, "./src/components/"))
    root = await provider.resolve(_params(workspace, "./"))

    assert nested is not None
    assert nested.relative_path == "src/components/"
    assert nested.type is MentionType.DIRECTORY
    assert root is not None
    assert root.relative_path == "./"


@pytest.mark.asyncio
async def test_concurrent_suggestions_share_one_walk(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _counting_scans(monkeypatch)
    provider = FileMentionProvider(MentionIndexCache())

    first, second = await asyncio.gather(
        provider.suggest(_params(workspace, "src")), provider.suggest(_params(workspace, "src"))
    )

    assert first == second
    assert len(calls) == len(set(calls))
    assert calls.count(str(workspace)) == 1


@pytest.mark.asyncio
async def test_concurrent_coordinator_suggestions_walk_once_per_index(
    workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    calls = _counting_scans(monkeypatch)
    coordinator = MentionCoordinator.create()

    await asyncio.gather(
        coordinator.suggest(WORKSPACE_ID, str(workspace), "main"),
        coordinator.suggest(WORKSPACE_ID, str(workspace), "main"),
    )

    # one walk for the file index, one for the directory index
    assert calls.count(str(workspace)) == 2


@pytest.mark.asyncio
async def test_index_is_reused_until_ttl_expires(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    now = [100.0]
    calls = _counting_scans(monkeypatch)
    provider = FileMentionProvider(MentionIndexCache(10.0, clock=lambda: now[0]))

    await provider.index(WORKSPACE_ID, str(workspace))
    now[0] += 9.5
    await provider.index(WORKSPACE_ID, str(workspace))
    assert calls.count(str(workspace)) == 1

    now[0] += 1.0
    await provider.index(WORKSPACE_ID, str(workspace))
    assert calls.count(str(workspace)) == 2


@pytest.mark.asyncio
async def test_index_rebuilt_when_workspace_path_changes(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    _touch(first, "alpha.txt")
    _touch(second, "beta.txt")
    provider = FileMentionProvider(MentionIndexCache())

    before = [entry.value for entry in await provider.index(WORKSPACE_ID, str(first))]
    after = [entry.value for entry in await provider.index(WORKSPACE_ID, str(second))]

    assert before == ["alpha.txt"]
    assert after == ["beta.txt"]


@pytest.mark.asyncio
async def test_missing_workspace_contributes_nothing(tmp_path: Path) -> None:
    provider = FileMentionProvider(MentionIndexCache())

    assert await provider.suggest(_params(tmp_path / "missing", "a")) == []


@pytest.mark.asyncio
async def test_cache_invalidate_forces_rebuild(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _counting_scans(monkeypatch)
    cache = MentionIndexCache()
    provider = FileMentionProvider(cache)

    await provider.index(WORKSPACE_ID, str(workspace))
    cache.invalidate(WORKSPACE_ID)
    await provider.index(WORKSPACE_ID, str(workspace))

    assert calls.count(str(workspace)) == 2
    assert cache.in_flight_count() == 0


@pytest.mark.asyncio
async def test_mcp_provider(tmp_path: Path) -> None:
    provider = McpMentionProvider()

    suggestions = await provider.suggest(_params(tmp_path, "docs:openapi/users"))
    mention = await provider.resolve(_params(tmp_path, "docs:openapi/users"))

    assert [suggestion.value for suggestion in suggestions] == ["docs:openapi/users"]
    assert mention is not None
    assert mention.type is MentionType.MCP
    assert mention.payload == {"server": "docs", "resource": "openapi/users"}
    assert mention.absolute_path is None


def test_parse_mcp_query() -> None:
    assert parse_mcp_query("docs:") is None
    assert parse_mcp_query(":x") is None
    assert parse_mcp_query("plain") is None
    target = parse_mcp_query("db:tables/users")
    assert target is not None
    assert (target.server, target.resource) == ("db", "tables/users")


@pytest.mark.asyncio
async def test_file_resolution_leaves_existing_directories_alone(workspace: Path) -> None:
    provider = FileMentionProvider(MentionIndexCache())

    assert await provider.resolve(_params(workspace, "src")) is None
    assert await provider.resolve(_params(workspace, "src/components")) is None


@pytest.mark.asyncio
async def test_unreadable_subtree_contributes_nothing(workspace: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    scan = walk_module._scan_directory
    blocked = str(workspace / "src")

    def failing(path: str):
        if path == blocked:
            raise PermissionError(13, "Permission denied", path)
        return scan(path)

    monkeypatch.setattr(walk_module, "_scan_directory", failing)

    cache = MentionIndexCache()
    file_index = await FileMentionProvider(cache).index(WORKSPACE_ID, str(workspace))
    directory_index = await DirectoryMentionProvider(cache).index(WORKSPACE_ID, str(workspace))
    files = [entry.value for entry in file_index]
    directories = [entry.value for entry in directory_index]

    assert "assets/logo.png" in files
    assert not any(value.startswith("src/") for value in files)
    assert "src/" in directories
    assert "src/components/" not in directories

"""Minimal frontmatter parsing for skill documents."""

from __future__ import annotations

from dataclasses import dataclass

FRONTMATTER_DELIMITER = "---"
RECOGNIZED_KEYS = frozenset({"name", "description"})


@dataclass(frozen=True)
class SkillFrontmatter:
    name: str | None = None
    description: str | None = None


def parse_skill_frontmatter(markdown: str) -> SkillFrontmatter:
    """Parse a leading `---` block of single-line `key: value` pairs.

    Only `name` and `description` are kept. Indented lines, list items and
    keys without an inline value are skipped, so nested structures never
    leak into the result.

    This is a line reader rather than `yaml.safe_load`: skill documents in the
    wild carry frontmatter that is not valid YAML (unquoted colons, stray tabs),
    and one malformed block must not hide the skill. Multi-line values are not
    supported.
    """

    lines = markdown.splitlines()
    if not lines or lines[0].rstrip() != FRONTMATTER_DELIMITER:
        return SkillFrontmatter()

    fields: dict[str, str] = {}
    for line in lines[1:]:
        if line.rstrip() == FRONTMATTER_DELIMITER:
            return SkillFrontmatter(name=fields.get("name"), description=fields.get("description"))
        if not line or line[0].isspace():
            continue
        key, sep, value = line.partition(":")
        key = key.strip()
        value = value.strip()
        if not sep or not key or not value:
            continue
        if key in RECOGNIZED_KEYS and key not in fields:
            fields[key] = _unquote(value)

    # Unterminated block.
    return SkillFrontmatter()


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1].strip()
    return value

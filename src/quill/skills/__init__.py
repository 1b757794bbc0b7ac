"""Skill document discovery."""

from quill.skills.frontmatter import SkillFrontmatter, parse_skill_frontmatter
from quill.skills.loader import discover_skill_commands, normalize_command_name

__all__ = ["SkillFrontmatter", "discover_skill_commands", "normalize_command_name", "parse_skill_frontmatter"]

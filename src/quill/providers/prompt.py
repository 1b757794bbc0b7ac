"""Assistant prompt construction from an authoritative parse result."""

from __future__ import annotations

from quill.composer.types import CommandDefinition, CommandHandler, ComposerParseResult, MentionRef

COMMAND_INSTRUCTIONS: dict[str, str] = {
    "compact": "Respond concisely.",
    "review": "Perform a review-style response focused on issues, risks, and missing tests.",
    "plan": "Provide an implementation plan with clear steps.",
    "status": "Summarize the current workspace status.",
    "context": "Summarize what is currently in context.",
    "memory": "Review the project memory and record any note included in the request.",
    "init": "Draft a concise project memory document describing how to work in this workspace.",
    "todos": "List the outstanding todo items.",
    "tasks": "List the background tasks and their state.",
    "resume": "Continue the previous conversation thread.",
    "rewind": "Return the conversation to an earlier point.",
    "rename": "Rename the current conversation thread.",
    "export": "Export the current conversation.",
    "add-dir": "Include the given directory as additional working context.",
    "config": "Inspect or update the assistant configuration.",
    "permissions": "Summarize the tool permission rules in effect.",
    "debug": "Diagnose the problem described in the request.",
    "cost": "Report the token cost of the current session.",
    "usage": "Report current plan usage limits.",
    "stats": "Report usage statistics.",
    "doctor": "Check the health of the assistant installation.",
    "bug": "Prepare a bug report for the described problem.",
    "mcp": "Report the configured MCP servers and their status.",
}

# (instruction without arguments, instruction with arguments)
TARGETED_INSTRUCTIONS: dict[str, tuple[str, str]] = {
    "diff": ("Focus on relevant git diff analysis.", "Focus on diff analysis for target: {args}."),
    "test": ("Focus on test strategy and validation.", "Focus on testing scope: {args}."),
}


def command_instruction(name: str, args: list[str], definition: CommandDefinition | None) -> str | None:
    if name in TARGETED_INSTRUCTIONS:
        bare, targeted = TARGETED_INSTRUCTIONS[name]
        args_text = " ".join(args).strip()
        return targeted.format(args=args_text) if args_text else bare
    if name in COMMAND_INSTRUCTIONS:
        return COMMAND_INSTRUCTIONS[name]
    if definition is not None and definition.handler is CommandHandler.CUSTOM:
        return f'Use the "{name}" skill.'
    return None


def mention_label(mention: MentionRef) -> str:
    return mention.relative_path or mention.display


def strip_command_prefix(prompt: str, raw_command: str) -> str:
    if raw_command and prompt.lower().startswith(raw_command.lower()):
        return prompt[len(raw_command) :].strip()
    return prompt


def build_prompt(parse_result: ComposerParseResult, definition: CommandDefinition | None = None) -> str:
    """Compose instruction line, referenced mentions and the remaining free text."""

    command = parse_result.command
    sections: list[str] = []

    if command is not None:
        instruction = command_instruction(command.name, command.args, definition)
        if instruction:
            sections.append(instruction)

    if parse_result.mentions:
        listing = "\n".join(f"- {mention_label(mention)}" for mention in parse_result.mentions)
        sections.append(f"Referenced files:\n{listing}")

    user_prompt = parse_result.normalized_prompt
    if command is not None:
        user_prompt = strip_command_prefix(user_prompt, command.raw)
    if user_prompt:
        sections.append(f"User request:\n{user_prompt}")

    return "\n\n".join(sections).strip()

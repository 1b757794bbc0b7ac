"""Bridge to the external command-line assistant."""

from __future__ import annotations

import asyncio
import json
import shutil
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from loguru import logger

from quill.composer.types import ComposerExecutionResult, DiagnosticCode
from quill.errors import AssistantBridgeError

DEFAULT_ASSISTANT_COMMAND = "claude"
DEFAULT_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True)
class AssistantRequest:
    cwd: str
    prompt: str
    model_override: str | None = None


class AssistantBridge(ABC):
    """Runs one prompt through an external assistant and reports the outcome as data."""

    @abstractmethod
    async def run(self, request: AssistantRequest) -> ComposerExecutionResult:
        """Execute the request; never raises for provider failures."""


def classify_error(message: str) -> DiagnosticCode:
    lowered = message.lower()
    if "invalid_model" in lowered:
        return DiagnosticCode.CMD_INVALID_ARGS
    if "auth" in lowered or "token" in lowered:
        return DiagnosticCode.PROVIDER_AUTH_REQUIRED
    return DiagnosticCode.PROVIDER_UNAVAILABLE


def interpret_response(raw: str) -> ComposerExecutionResult:
    """Turn assistant stdout (structured JSON or plain text) into an execution result."""

    text = raw.strip()
    if not text:
        return ComposerExecutionResult.failure(
            DiagnosticCode.PROVIDER_UNAVAILABLE, "Assistant returned an empty response."
        )

    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        payload = None
    if not isinstance(payload, dict):
        return ComposerExecutionResult(ok=True, provider="external-assistant", output=text)

    result = payload.get("result")
    if payload.get("is_error"):
        message = result if isinstance(result, str) and result else "Assistant returned an error response."
        return ComposerExecutionResult.failure(classify_error(message), message)

    output = result if isinstance(result, str) else text
    return ComposerExecutionResult(ok=True, provider="external-assistant", output=output)


class ClaudeCliBridge(AssistantBridge):
    """Invokes the assistant CLI non-interactively with JSON output."""

    def __init__(
        self, command: str = DEFAULT_ASSISTANT_COMMAND, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        self.command = command
        self.timeout_seconds = timeout_seconds

    def build_args(self, request: AssistantRequest) -> list[str]:
        args = ["-p", "--output-format", "json"]
        if request.model_override:
            args.extend(["--model", request.model_override])
        args.append(request.prompt)
        return args

    async def run(self, request: AssistantRequest) -> ComposerExecutionResult:
        start = time.monotonic()
        try:
            stdout, stderr = await self._invoke(request)
        except AssistantBridgeError as exc:
            logger.warning("assistant.run.error cwd={} error={}", request.cwd, exc)
            return ComposerExecutionResult.failure(
                DiagnosticCode.PROVIDER_UNAVAILABLE, f"Failed to execute assistant CLI: {exc}"
            )

        result = interpret_response(stdout.strip() or stderr.strip())
        logger.info(
            "assistant.run.end ok={} duration={:.3f}ms", result.ok, (time.monotonic() - start) * 1000
        )
        return result

    async def _invoke(self, request: AssistantRequest) -> tuple[str, str]:
        executable = shutil.which(self.command) or self.command
        logger.info("assistant.run.start cwd={} model={}", request.cwd, request.model_override or "-")
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                *self.build_args(request),
                cwd=request.cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise AssistantBridgeError(str(exc)) from exc

        try:
            async with asyncio.timeout(self.timeout_seconds):
                stdout_bytes, stderr_bytes = await process.communicate()
        except TimeoutError as exc:
            await _kill(process)
            raise AssistantBridgeError(f"timed out after {self.timeout_seconds:g}s") from exc

        stdout_text = (stdout_bytes or b"").decode("utf-8", errors="replace")
        stderr_text = (stderr_bytes or b"").decode("utf-8", errors="replace")
        return stdout_text, stderr_text


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is not None:
        return
    try:
        process.kill()
    except ProcessLookupError:
        return
    await process.wait()

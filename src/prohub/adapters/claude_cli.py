"""Claude CLI adapter - subprocess wrapper for the claude tool."""

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Claude CLI not found. Install with: npm install -g @anthropic-ai/claude-code"


class ClaudeCLIService:
    """
    Claude CLI subprocess adapter.

    Implements LLMService protocol. The prompt goes in on stdin so long task
    lists are not limited by argv size.
    """

    def __init__(
        self,
        cwd: Path | str | None = None,
        timeout: int = 300,  # 5 minutes default
    ):
        self.cwd = Path(cwd) if cwd else None
        self.timeout = timeout

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        try:
            proc = subprocess.run(
                ["claude", "-p", "-"],
                input=prompt,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise RuntimeError(NOT_FOUND_MESSAGE)
        except subprocess.TimeoutExpired:
            raise RuntimeError(f"Claude CLI timed out after {self.timeout}s")

        if proc.returncode != 0:
            logger.error(f"Claude CLI failed: {proc.stderr}")
            raise RuntimeError(f"Claude CLI failed: {proc.stderr}")
        return proc.stdout

"""Configuration management for ProHub."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

PROHUB_HOME = Path(os.environ.get("PROHUB_HOME", Path.home() / "prohub"))
CONFIG_FILE = PROHUB_HOME / "config" / "prohub.conf"
DATA_DIR = PROHUB_HOME / "data"

LLM_BACKENDS = ("claude", "http")


@dataclass
class Config:
    """ProHub configuration."""

    llm_backend: str = "claude"
    llm_api_url: str = "https://api.openai.com/v1/chat/completions"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_timeout: int = 300
    default_deadline_days: int = 7
    data_file: str = ""

    @property
    def data_path(self) -> Path:
        """Resolved workspace file."""
        if self.data_file:
            return Path(self.data_file).expanduser()
        return DATA_DIR / "workspace.json"


def _strip_value(value: str) -> str:
    """Unquote a value and drop inline comments."""
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def load_config(path: Path | None = None) -> Config:
    """Load configuration from prohub.conf, then the environment."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _strip_value(value.strip())

            match key:
                case "llm_backend":
                    if value.lower() in LLM_BACKENDS:
                        config.llm_backend = value.lower()
                    else:
                        logger.warning(f"Unknown LLM_BACKEND {value!r}, using {config.llm_backend}")
                case "llm_api_url":
                    config.llm_api_url = value
                case "llm_api_key":
                    config.llm_api_key = value
                case "llm_model":
                    config.llm_model = value
                case "llm_timeout":
                    config.llm_timeout = _parse_int(key, value, config.llm_timeout)
                case "default_deadline_days":
                    config.default_deadline_days = _parse_int(key, value, config.default_deadline_days)
                case "data_file":
                    config.data_file = value

    if not config.llm_api_key:
        config.llm_api_key = os.environ.get("PROHUB_LLM_API_KEY", "")

    return config

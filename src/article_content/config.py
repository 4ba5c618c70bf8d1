"""Configuration management."""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .extraction.models import ExtractionLimits
from .fetching.fetcher import BROWSER_USER_AGENT

# Load .env file from current working directory
load_dotenv()


@dataclass
class Config:
    """Application configuration."""

    fetch_timeout_seconds: float = 10
    user_agent: str = BROWSER_USER_AGENT
    max_fragment_length: int = 500_000
    max_page_length: int = 1_000_000
    max_blocks: int = 100
    max_depth: int = 20
    max_code_length: int = 5000
    max_inline_nodes: int = 500

    def __post_init__(self):
        for name in (
            "fetch_timeout_seconds",
            "max_fragment_length",
            "max_page_length",
            "max_blocks",
            "max_depth",
            "max_code_length",
            "max_inline_nodes",
        ):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file. A missing file means defaults.

        Environment variables take precedence over YAML values:
        - FETCH_TIMEOUT_SECONDS: Timeout for the full-article request
        - READER_USER_AGENT: User-Agent header sent with the request
        """
        data = {}
        if Path(path).exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a mapping")

        # Environment variables take precedence over YAML config
        timeout = os.environ.get("FETCH_TIMEOUT_SECONDS") or data.get("fetch_timeout_seconds", 10)
        user_agent = os.environ.get("READER_USER_AGENT") or data.get(
            "user_agent", BROWSER_USER_AGENT
        )

        return cls(
            fetch_timeout_seconds=float(timeout),
            user_agent=user_agent,
            max_fragment_length=int(data.get("max_fragment_length", 500_000)),
            max_page_length=int(data.get("max_page_length", 1_000_000)),
            max_blocks=int(data.get("max_blocks", 100)),
            max_depth=int(data.get("max_depth", 20)),
            max_code_length=int(data.get("max_code_length", 5000)),
            max_inline_nodes=int(data.get("max_inline_nodes", 500)),
        )

    def limits(self) -> ExtractionLimits:
        return ExtractionLimits(
            max_fragment_length=self.max_fragment_length,
            max_page_length=self.max_page_length,
            max_blocks=self.max_blocks,
            max_depth=self.max_depth,
            max_code_length=self.max_code_length,
            max_inline_nodes=self.max_inline_nodes,
        )

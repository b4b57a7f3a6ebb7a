"""
Site Configuration Module
=========================

Loads the settings for the crawled origin from a YAML file: where the
site lives, how politely to fetch it, which hrefs are binary files and
which URL shapes identify tags, categories and articles.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_ORIGIN = "https://thealexandrian.net/"
DEFAULT_FILE_EXTENSIONS = [
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".pdf", ".mp3", ".mp4", ".zip", ".psd",
]
DEFAULT_TAG_PATTERN = r"/tag/([^/]+)(?:/page/\d+)?"
DEFAULT_CATEGORY_PATTERN = r"/category/([^/]+)(?:/page/\d+)?"
DEFAULT_ARTICLE_PATTERN = r"/wordpress/(\d+)/"


@dataclass
class ClassificationPatterns:
    """URL-shape patterns used to classify visited links."""

    tag: str = DEFAULT_TAG_PATTERN
    category: str = DEFAULT_CATEGORY_PATTERN
    article: str = DEFAULT_ARTICLE_PATTERN

    _compiled: dict[str, re.Pattern[str]] | None = field(
        default=None, repr=False, compare=False
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ClassificationPatterns:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        return cls(
            tag=data.get("tag", DEFAULT_TAG_PATTERN),
            category=data.get("category", DEFAULT_CATEGORY_PATTERN),
            article=data.get("article", DEFAULT_ARTICLE_PATTERN),
        )

    def compiled(self, name: str) -> re.Pattern[str]:
        """Get a compiled pattern by name ("tag", "category" or "article")."""
        if self._compiled is None:
            self._compiled = {
                "tag": re.compile(self.tag),
                "category": re.compile(self.category),
                "article": re.compile(self.article),
            }
        return self._compiled[name]


@dataclass
class SiteConfig:
    """Configuration for the single crawled origin."""

    origin: str = DEFAULT_ORIGIN
    user_agent: str = "ArticleHarvester/0.1"
    request_delay_ms: int = 1000
    request_timeout: float = 30.0
    max_retries: int = 1
    file_extensions: list[str] = field(default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS))
    patterns: ClassificationPatterns = field(default_factory=ClassificationPatterns)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SiteConfig:
        """Create from dictionary, using defaults for missing values."""
        if data is None:
            return cls()
        return cls(
            origin=data.get("origin", DEFAULT_ORIGIN),
            user_agent=data.get("user_agent", "ArticleHarvester/0.1"),
            request_delay_ms=int(data.get("request_delay_ms", 1000)),
            request_timeout=float(data.get("request_timeout", 30.0)),
            max_retries=max(1, int(data.get("max_retries", 1))),
            file_extensions=list(data.get("file_extensions", DEFAULT_FILE_EXTENSIONS)),
            patterns=ClassificationPatterns.from_dict(data.get("patterns")),
        )

    @property
    def root_url(self) -> str:
        """The normalized origin root used to seed an empty frontier."""
        from article_harvester.ingestion.normalizer import normalize_url

        return normalize_url(self.origin)


def load_config(config_path: Path | str) -> SiteConfig:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the site.yaml file

    Returns:
        The parsed SiteConfig
    """
    config_path = Path(config_path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return SiteConfig.from_dict(data.get("site"))


# Global config instance
_default_config: SiteConfig | None = None


def get_default_config() -> SiteConfig:
    """
    Get the default site configuration.

    Loads configuration from the path specified in HARVESTER_CONFIG_PATH
    environment variable, or falls back to config/site.yaml. Built-in
    defaults are used when neither exists.

    Returns:
        The global SiteConfig instance
    """
    global _default_config

    if _default_config is None:
        config_path = os.environ.get("HARVESTER_CONFIG_PATH")
        if config_path:
            path = Path(config_path)
        else:
            # Default to config/site.yaml relative to project root
            module_dir = Path(__file__).parent
            project_root = module_dir.parent.parent
            path = project_root / "config" / "site.yaml"

        _default_config = load_config(path) if path.exists() else SiteConfig()

    return _default_config


def reset_default_config() -> None:
    """Reset the default config (useful for testing)."""
    global _default_config
    _default_config = None

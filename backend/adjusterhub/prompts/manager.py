"""Versioned prompt templates stored on disk.

Layout::

    prompts/templates/{prompt_name}/v{N}.txt
    prompts/templates/{prompt_name}/metadata.json   (optional, keyed by version)

Usage:
    manager = PromptManager()
    system = manager.render("assistant_system", name="Jane Doe", role="ADJUSTER", ...)
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class _SafeDict(dict):
    """format_map helper leaving unknown placeholders visible instead of raising."""

    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class PromptManager:
    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir or Path(__file__).parent / "templates"
        if not self.base_dir.exists():
            raise FileNotFoundError(f"Prompt templates directory not found: {self.base_dir}")

    @lru_cache(maxsize=32)
    def get(self, prompt_name: str, version: str = "latest") -> str:
        """Raw template text for ``prompt_name`` at ``version`` ("v1", "v2", ... or "latest")."""
        if version == "latest":
            version = self._latest_version(prompt_name)
        path = self.base_dir / prompt_name / f"{version}.txt"
        if not path.exists():
            raise FileNotFoundError(f"Prompt '{prompt_name}' version '{version}' not found at {path}")
        text = path.read_text(encoding="utf-8").strip()
        logger.debug("Loaded prompt %s:%s (%d chars)", prompt_name, version, len(text))
        return text

    def render(self, prompt_name: str, version: str = "latest", **context: Any) -> str:
        """Template with ``{placeholders}`` filled from ``context``."""
        return self.get(prompt_name, version).format_map(_SafeDict(context))

    def get_metadata(self, prompt_name: str, version: str) -> Dict[str, Any]:
        meta_path = self.base_dir / prompt_name / "metadata.json"
        if not meta_path.exists():
            return {}
        try:
            return json.loads(meta_path.read_text()).get(version, {})
        except json.JSONDecodeError as exc:
            logger.error("Invalid JSON in %s: %s", meta_path, exc)
            return {}

    def list_versions(self, prompt_name: str) -> List[str]:
        prompt_dir = self.base_dir / prompt_name
        if not prompt_dir.exists():
            return []
        return sorted((p.stem for p in prompt_dir.glob("v*.txt")), key=self._version_number)

    def _latest_version(self, prompt_name: str) -> str:
        versions = self.list_versions(prompt_name)
        if not versions:
            raise FileNotFoundError(f"No versions found for prompt '{prompt_name}' in {self.base_dir}")
        return versions[-1]

    @staticmethod
    def _version_number(version: str) -> int:
        digits = "".join(ch for ch in version if ch.isdigit())
        return int(digits) if digits else 0

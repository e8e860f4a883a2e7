"""
Prompt Management Module

Loads LLM prompts from text files next to this module so prompt wording can
change without touching the client code.
"""

from __future__ import annotations

import os
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent

# Set TABSENSE_PROMPT to try an alternate prompt file (without .txt)
CLASSIFIER_PROMPT_NAME = os.getenv("TABSENSE_PROMPT", "tab_classifier_prompt")


class PromptNotFoundError(FileNotFoundError):
    """Raised when a prompt template file does not exist."""


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self, prompts_dir: Path = PROMPTS_DIR):
        self._prompts_dir = prompts_dir
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        if prompt_name not in self._cache:
            prompt_path = self._prompts_dir / f"{prompt_name}.txt"
            if not prompt_path.exists():
                raise PromptNotFoundError(f"Prompt file not found: {prompt_path}")
            self._cache[prompt_name] = prompt_path.read_text(encoding="utf-8")
        return self._cache[prompt_name]

    def get_classifier_prompt(self, title: str, url: str, content: str) -> str:
        """
        Fill the tab classifier template.

        Args:
            title: Tab title
            url: Tab URL
            content: Page text, already truncated by the caller

        Returns:
            Formatted prompt string
        """
        template = self.load_prompt(CLASSIFIER_PROMPT_NAME)
        return template.format(title=title, url=url, content=content)

    def reload(self) -> None:
        """Clear cache and reload prompts from disk"""
        self._cache.clear()


_loader = PromptLoader()


def get_classifier_prompt(title: str, url: str, content: str) -> str:
    """Get classifier prompt (convenience function)"""
    return _loader.get_classifier_prompt(title=title, url=url, content=content)


def reload_prompts() -> None:
    _loader.reload()

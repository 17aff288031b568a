"""
Prompt Management Module

Loads LLM prompts from external text files so prompt wording can change
without touching code.
"""

from __future__ import annotations

import os
from pathlib import Path

PROMPTS_DIR = Path(__file__).parent

# Set LEETNOTES_NOTES_PROMPT to try an alternate template (file name without .txt)
NOTES_PROMPT_NAME = os.getenv("LEETNOTES_NOTES_PROMPT", "notes_prompt")


class PromptLoader:
    """Load and cache prompt templates from files"""

    def __init__(self):
        self._cache: dict[str, str] = {}

    def load_prompt(self, prompt_name: str) -> str:
        """
        Load a prompt template from file.

        Args:
            prompt_name: Name of the prompt file (without .txt extension)

        Returns:
            Prompt template string
        """
        if prompt_name not in self._cache:
            prompt_path = PROMPTS_DIR / f"{prompt_name}.txt"

            if not prompt_path.exists():
                raise FileNotFoundError(f"Prompt file not found: {prompt_path}")

            with open(prompt_path, encoding="utf-8") as f:
                self._cache[prompt_name] = f.read()

        return self._cache[prompt_name]

    def get_notes_prompt(self, code: str, title: str, language: str) -> str:
        """
        Get the study-notes prompt with the submission injected.

        Uses str.replace rather than str.format: submitted code is full of braces.
        """
        template = self.load_prompt(NOTES_PROMPT_NAME)
        return (
            template.replace("{title}", title)
            .replace("{language}", language)
            .replace("{code}", code)
        )


_loader = PromptLoader()


def get_notes_prompt(code: str, title: str, language: str) -> str:
    """Get study-notes prompt (convenience function)"""
    return _loader.get_notes_prompt(code=code, title=title, language=language)

# daymap/planning/prompts/__init__.py
"""Prompt templates for the feasibility check and roadmap generation."""

from pathlib import Path


def load_prompt(name: str) -> str:
    """Load a prompt template by name.

    Args:
        name: Prompt filename without .txt extension ('feasibility', 'roadmap', 'system')

    Returns:
        Template text (str.format placeholders, literal braces doubled)

    Raises:
        FileNotFoundError: If prompt file doesn't exist
    """
    prompt_path = Path(__file__).parent / f"{name}.txt"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt not found: {prompt_path}")

    return prompt_path.read_text(encoding="utf-8")


__all__ = ["load_prompt"]

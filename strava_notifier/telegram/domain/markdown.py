from __future__ import annotations

# Characters with meaning in Telegram's legacy Markdown parse mode.
MARKDOWN_SPECIAL = ("_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    """Escape user-supplied text for a Markdown message."""
    for char in MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


__all__ = ["MARKDOWN_SPECIAL", "escape_markdown"]

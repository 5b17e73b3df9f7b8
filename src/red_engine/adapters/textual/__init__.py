"""Textual adapter helpers."""

from .controller import KEY_BINDINGS, Prompt, TextualEditorAdapter, TextualUIHooks

__all__ = ["KEY_BINDINGS", "Prompt", "TextualEditorAdapter", "TextualUIHooks"]

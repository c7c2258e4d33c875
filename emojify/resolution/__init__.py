"""Emoji resolution module - resolves descriptions against the reference table."""

from .emoji_resolver import EmojiResolver, normalize_description

__all__ = ["EmojiResolver", "normalize_description"]

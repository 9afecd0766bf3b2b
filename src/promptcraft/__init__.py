"""Promptcraft - prompt builder and relay for AI image generation."""

__version__ = "0.1.0"

from promptcraft.core.config import PromptcraftConfig, config

__all__ = [
    "PromptcraftConfig",
    "config",
]

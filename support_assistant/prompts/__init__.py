"""Prompt rendering for the hosted assistant."""

from .builder import build_prompt

__all__ = ["build_prompt"]

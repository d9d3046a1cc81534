"""Inference service adapters."""

from .gemini import GeminiClient, GeminiRequest

__all__ = ["GeminiClient", "GeminiRequest"]

"""Generative-AI collaborator subpackage (Gemini REST API)."""

from netvisio.assistant.client import GeminiAssistant

__all__ = ["GeminiAssistant"]

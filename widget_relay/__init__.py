"""Streaming relay between a website chat widget and an OpenAI assistant."""

__version__ = "1.0.0"

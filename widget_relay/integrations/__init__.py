"""Clients for the OpenAI Assistants API and the Telegram Bot API."""

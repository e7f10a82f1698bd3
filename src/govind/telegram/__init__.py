"""Telegram Bot API integration: webhook ingestion and outbound messages."""

"""Govind backend: Telegram relay and guarded Gemini proxy."""

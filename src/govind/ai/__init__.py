"""Guarded proxy to the Gemini generative AI provider."""

"""Secure chat proxy: keeps the upstream API key and assistant prompts server-side."""

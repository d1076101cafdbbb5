"""Adapters: backend writers and configuration providers."""

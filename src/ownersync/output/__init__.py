"""Reporters — Rich terminal tables and JSON."""

"""Core acquisition building blocks."""

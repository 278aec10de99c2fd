"""Pollen forecast reports for Austrian postal codes, generated by Gemini."""

__version__ = "0.3.0"

"""Svara Lekhini: live pitch-to-notation for Carnatic and Western singing."""

__version__ = "0.1.0"

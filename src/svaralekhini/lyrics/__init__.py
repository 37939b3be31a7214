"""Lyric syllables, syllable-to-note alignment and editing."""

"""Notation: scale-degree mapping, note segmentation, display glyphs."""

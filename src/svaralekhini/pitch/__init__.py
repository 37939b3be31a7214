"""Pitch front end: extraction, noise rejection, stabilization."""

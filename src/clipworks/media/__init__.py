"""Scratch files, artifact publishing and retention."""

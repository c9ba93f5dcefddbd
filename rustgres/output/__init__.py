"""Rendering, output planning and file writing."""

"""Utility helpers for ids, durations, filenames and logging."""

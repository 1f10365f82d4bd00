"""Song API: YouTube audio metadata, stream URLs and downloads over HTTP."""

__version__ = "1.0.0"

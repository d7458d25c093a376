"""Video to MP3 conversion gateway."""

__version__ = "1.0.0"

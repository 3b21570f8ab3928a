"""Interactive terminal wizard to upload a video to YouTube."""

__version__ = "1.0.0"

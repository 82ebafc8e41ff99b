"""Upload images and screenshots to Imgur and keep a journal of what was created."""

__version__ = "0.1.0"

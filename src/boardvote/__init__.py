"""boardvote - shared board game collections with group voting."""

__version__ = "0.1.0"

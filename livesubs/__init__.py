"""Live and post-recorded captioning on top of an external speech recognizer."""

__version__ = "1.0.0"

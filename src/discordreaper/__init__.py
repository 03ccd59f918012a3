"""Discord attachment reaper - archives channel attachments into cloud storage."""

__version__ = "0.1.0"

"""okhub: a GitHub v3 API client for the command line."""

__version__ = "0.1.0"

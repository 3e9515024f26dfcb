"""Multi-conversation chat server and web front end for AI model providers."""

__version__ = "0.1.0"
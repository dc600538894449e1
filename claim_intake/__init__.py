"""Claim intake service for a WhatsApp fact-checking bot."""

__version__ = "0.1.0"

"""Conversational expense analytics agent."""

__version__ = "0.1.0"

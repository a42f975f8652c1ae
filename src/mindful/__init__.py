"""Mindful - session orchestration core for an emotional-support chat product."""

__version__ = "0.1.0"

"""HTTP API for Mindful."""

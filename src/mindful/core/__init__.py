"""Pure policy pieces: modes, sentiment, errors, locking and resilience."""

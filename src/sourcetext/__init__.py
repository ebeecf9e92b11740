"""Source extraction, text normalization and resilient JSON recovery."""

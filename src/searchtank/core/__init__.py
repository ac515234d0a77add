"""Core mapping, query building and rehydration logic."""

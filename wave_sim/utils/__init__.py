"""Utilities: XOR combination, metrics summaries and topology plots."""

"""API route tables."""

"""Console UI helpers."""

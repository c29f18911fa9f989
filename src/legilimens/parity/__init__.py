"""Cross-module output normalization."""

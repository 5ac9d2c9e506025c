"""Incremental symbol search over sharded API-reference indexes."""

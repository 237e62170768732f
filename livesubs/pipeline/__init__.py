"""Batch and real-time captioning pipelines."""

"""Ingestion helpers: payload normalization and field mapping."""

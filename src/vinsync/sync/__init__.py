"""Reconciliation, update gating and the per-issue sync loop."""

"""Shared utilities for reconciliation runs."""

"""Scan orchestration: preflight checks, concurrent oracle calls, engine."""

"""Span extraction & reconciliation engine.

Each stage is a pure function over immutable inputs:

    normalize -> validate -> reconcile / summarize

No stage contacts the oracle or keeps state across requests.
"""

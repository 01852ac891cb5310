"""Record validation engine.

This module validates record files against structural, vocabulary,
cross-reference, and markup rules and reports coded, located issues.
"""

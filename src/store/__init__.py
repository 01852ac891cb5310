"""Relational materialization layer.

This module builds the SQLite catalog with full-text search from records.
It also generates and applies incremental SQL patches between versions.
"""

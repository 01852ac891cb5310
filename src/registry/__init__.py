"""Controlled vocabularies and the slug index.

This module loads the schema vocabulary files and maintains the global
slug-to-collection index consulted before any record is created.
"""

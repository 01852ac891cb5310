"""Record file ingestion.

This module discovers and parses record YAML files with source positions.
It also reads baseline revisions used for change detection.
"""

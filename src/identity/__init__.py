"""Record identifier lifecycle.

This module assigns opaque identifiers at merge time, enforces that
assigned identifiers never change, and runs the one-time migration away
from legacy numeric identifiers.
"""

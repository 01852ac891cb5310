"""Core constants used across catalog modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

import re
from pathlib import Path

DEFAULT_REPO_ROOT = Path(".")
DATA_DIR_NAME = "data"
SCHEMA_DIR_NAME = "schema"
OUTPUT_DIR_NAME = "dist"
PATCHES_DIR_NAME = "patches"
DATABASE_FILE_NAME = "catalog.sqlite"
SLUG_INDEX_FILE_NAME = ".slug-index.json"
ID_MIGRATION_MAP_FILE_NAME = "id-migration-map.json"
VALIDATION_REPORT_FILE_NAME = "validation-report.json"

MANUFACTURERS = "manufacturers"
SOFTWARE = "software"
HARDWARE = "hardware"
COLLECTIONS = (MANUFACTURERS, SOFTWARE, HARDWARE)
RECORD_FILE_EXTENSIONS = (".yaml", ".yml")

CATEGORIES_FILE_NAME = "categories.yaml"
CATEGORY_ALIASES_FILE_NAME = "category-aliases.yaml"
FORMATS_FILE_NAME = "formats.yaml"
PLATFORMS_FILE_NAME = "platforms.yaml"
LOCALES_FILE_NAME = "locales.yaml"

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$|^[a-z0-9]$")
ID_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
ID_LENGTH = 21
ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{21}$")
LEGACY_ID_PATTERN = re.compile(r"^[0-9]+$")
YEAR_ONLY_PATTERN = re.compile(r"^\d{4}$")
RELEASE_DATE_PATTERN = re.compile(r"^\d{4}(-\d{2}(-\d{2})?)?$")
YOUTUBE_CANONICAL_PATTERN = re.compile(r"^https://www\.youtube\.com/watch\?v=[\w-]+$")
YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com", "m.youtube.com", "youtu.be")

MAX_SUGGESTION_DISTANCE = 3
DEFAULT_OPTION_DISPLAY_LIMIT = 10
MANUFACTURER_LIST_DISPLAY_LIMIT = 10

DEFAULT_CATALOG_VERSION = 1
SCHEMA_VERSION = 1
DEFAULT_DOCS_BASE_URL = "https://github.com/catalog/catalog/blob/main/docs/VALIDATION_ERRORS.md"

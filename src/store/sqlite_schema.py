"""Relational schema of the materialized catalog database.

Every table is declared once here; the full build renders DDL from these
definitions and both the build and the patch generator render INSERTs
from the same column lists.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.constants import HARDWARE, MANUFACTURERS, SOFTWARE

FTS_TABLE = "catalog_fts"
META_TABLE = "catalog_meta"

_TEXT_KEY = "TEXT PRIMARY KEY"


@dataclass(frozen=True)
class TableSchema:
    """One relational table.

    Attributes:
        name: Table name.
        columns: Column name and SQL type/constraint pairs, in insert order.
        owner_column: Column referencing the owning top-level record, if a child.
    """

    name: str
    columns: tuple[tuple[str, str], ...]
    owner_column: str | None = None

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(name for name, _ in self.columns)

    def create_statement(self) -> str:
        body = ",\n  ".join(f"{name} {definition}" for name, definition in self.columns)
        return f"CREATE TABLE {self.name} (\n  {body}\n);"


def _parent_table(name: str, extra: tuple[tuple[str, str], ...]) -> TableSchema:
    return TableSchema(
        name=name,
        columns=(
            ("id", _TEXT_KEY),
            ("slug", "TEXT NOT NULL UNIQUE"),
            ("name", "TEXT NOT NULL"),
            *extra,
        ),
    )


def _child_table(
    prefix: str,
    parent: str,
    suffix: str,
    columns: tuple[tuple[str, str], ...],
) -> TableSchema:
    owner_column = f"{prefix}_id"
    return TableSchema(
        name=f"{prefix}_{suffix}",
        columns=(
            ("id", _TEXT_KEY),
            (owner_column, f"TEXT NOT NULL REFERENCES {parent}(id) ON DELETE CASCADE"),
            *columns,
        ),
        owner_column=owner_column,
    )


_PRODUCT_COLUMNS: tuple[tuple[str, str], ...] = (
    ("manufacturer_id", "TEXT NOT NULL REFERENCES manufacturers(id)"),
    ("primary_category", "TEXT"),
    ("secondary_category", "TEXT"),
    ("website", "TEXT"),
    ("description", "TEXT"),
    ("details", "TEXT"),
    ("specs", "TEXT"),
    ("release_date", "TEXT"),
    ("release_date_year_only", "INTEGER"),
)


def _common_children(prefix: str, parent: str) -> tuple[TableSchema, ...]:
    return (
        _child_table(
            prefix,
            parent,
            "search_terms",
            (("position", "INTEGER NOT NULL"), ("term", "TEXT NOT NULL")),
        ),
        _child_table(
            prefix,
            parent,
            "images",
            (("position", "INTEGER NOT NULL"), ("src", "TEXT NOT NULL"), ("alt", "TEXT")),
        ),
        _child_table(
            prefix,
            parent,
            "translations",
            (("locale", "TEXT NOT NULL"), ("content", "TEXT NOT NULL")),
        ),
    )


def _product_children(prefix: str, parent: str) -> tuple[TableSchema, ...]:
    """Tables shared by software and hardware.

    ``parent_key`` names the record, version or revision row that owns a
    nested version, price or link.
    """
    return (
        _child_table(
            prefix,
            parent,
            "categories",
            (("position", "INTEGER NOT NULL"), ("category", "TEXT NOT NULL")),
        ),
        _child_table(
            prefix,
            parent,
            "versions",
            (
                ("parent_key", "TEXT NOT NULL"),
                ("position", "INTEGER NOT NULL"),
                ("name", "TEXT NOT NULL"),
                ("release_date", "TEXT"),
                ("release_date_year_only", "INTEGER"),
                ("pre_release", "INTEGER"),
                ("unofficial", "INTEGER"),
                ("url", "TEXT"),
                ("description", "TEXT"),
            ),
        ),
        _child_table(
            prefix,
            parent,
            "prices",
            (
                ("parent_key", "TEXT NOT NULL"),
                ("position", "INTEGER NOT NULL"),
                ("amount", "REAL NOT NULL"),
                ("currency", "TEXT NOT NULL"),
                ("as_of", "TEXT"),
                ("source", "TEXT"),
            ),
        ),
        _child_table(
            prefix,
            parent,
            "links",
            (
                ("parent_key", "TEXT NOT NULL"),
                ("position", "INTEGER NOT NULL"),
                ("type", "TEXT NOT NULL"),
                ("title", "TEXT"),
                ("url", "TEXT"),
                ("video_id", "TEXT"),
                ("provider", "TEXT"),
                ("description", "TEXT"),
            ),
        ),
    )


MANUFACTURER_TABLES: tuple[TableSchema, ...] = (
    _parent_table(
        "manufacturers",
        (
            ("company_name", "TEXT"),
            ("parent_company_id", "TEXT"),
            ("website", "TEXT"),
            ("description", "TEXT"),
        ),
    ),
    *_common_children("manufacturer", "manufacturers"),
)

SOFTWARE_TABLES: tuple[TableSchema, ...] = (
    _parent_table("software", _PRODUCT_COLUMNS),
    *_common_children("software", "software"),
    *_product_children("software", "software"),
    _child_table(
        "software",
        "software",
        "formats",
        (("position", "INTEGER NOT NULL"), ("format", "TEXT NOT NULL"), ("identifier", "TEXT")),
    ),
    _child_table(
        "software",
        "software",
        "platforms",
        (("position", "INTEGER NOT NULL"), ("platform", "TEXT NOT NULL")),
    ),
)

HARDWARE_TABLES: tuple[TableSchema, ...] = (
    _parent_table("hardware", _PRODUCT_COLUMNS),
    *_common_children("hardware", "hardware"),
    _child_table(
        "hardware",
        "hardware",
        "revisions",
        (
            ("position", "INTEGER NOT NULL"),
            ("name", "TEXT NOT NULL"),
            ("release_date", "TEXT"),
            ("release_date_year_only", "INTEGER"),
            ("url", "TEXT"),
            ("description", "TEXT"),
            ("has_own_io", "INTEGER NOT NULL"),
        ),
    ),
    _child_table(
        "hardware",
        "hardware",
        "io",
        (
            ("revision_id", "TEXT REFERENCES hardware_revisions(id) ON DELETE CASCADE"),
            ("position", "INTEGER NOT NULL"),
            ("name", "TEXT NOT NULL"),
            ("signal_flow", "TEXT NOT NULL"),
            ("category", "TEXT NOT NULL"),
            ("type", "TEXT NOT NULL"),
            ("connection", "TEXT NOT NULL"),
            ("max_connections", "INTEGER"),
            ("position_label", "TEXT"),
            ("column_position", "INTEGER"),
            ("row_position", "INTEGER"),
            ("description", "TEXT"),
        ),
    ),
    *_product_children("hardware", "hardware"),
)

COLLECTION_TABLES: dict[str, tuple[TableSchema, ...]] = {
    MANUFACTURERS: MANUFACTURER_TABLES,
    SOFTWARE: SOFTWARE_TABLES,
    HARDWARE: HARDWARE_TABLES,
}

# Parents precede their children so immediate foreign key checks pass.
ALL_TABLES: tuple[TableSchema, ...] = MANUFACTURER_TABLES + SOFTWARE_TABLES + HARDWARE_TABLES

TABLES_BY_NAME: dict[str, TableSchema] = {table.name: table for table in ALL_TABLES}

FTS_COLUMNS: tuple[str, ...] = (
    "id",
    "slug",
    "collection",
    "manufacturer_id",
    "name",
    "manufacturer_name",
    "categories",
    "description",
)

_FTS_STATEMENT = (
    f"CREATE VIRTUAL TABLE {FTS_TABLE} USING fts5(\n"
    "  id UNINDEXED,\n"
    "  slug UNINDEXED,\n"
    "  collection UNINDEXED,\n"
    "  manufacturer_id UNINDEXED,\n"
    "  name,\n"
    "  manufacturer_name,\n"
    "  categories,\n"
    "  description,\n"
    "  tokenize='porter unicode61'\n"
    ");"
)

_META_STATEMENT = f"CREATE TABLE {META_TABLE} (\n  key TEXT PRIMARY KEY,\n  value TEXT NOT NULL\n);"

_INDEX_STATEMENTS: tuple[str, ...] = (
    "CREATE INDEX idx_software_manufacturer ON software(manufacturer_id);",
    "CREATE INDEX idx_hardware_manufacturer ON hardware(manufacturer_id);",
    "CREATE INDEX idx_software_categories_category ON software_categories(category);",
    "CREATE INDEX idx_hardware_categories_category ON hardware_categories(category);",
    "CREATE INDEX idx_software_formats_format ON software_formats(format);",
    "CREATE INDEX idx_software_platforms_platform ON software_platforms(platform);",
)


def schema_script() -> str:
    """Render the complete DDL script for a fresh database."""
    statements = [table.create_statement() for table in ALL_TABLES]
    for table in ALL_TABLES:
        if table.owner_column is not None:
            statements.append(
                f"CREATE INDEX idx_{table.name}_owner ON {table.name}({table.owner_column});"
            )
    statements.extend(_INDEX_STATEMENTS)
    statements.append(_FTS_STATEMENT)
    statements.append(_META_STATEMENT)
    return "\n\n".join(statements) + "\n"


def child_tables(collection: str) -> tuple[TableSchema, ...]:
    """Return the child tables of a collection's parent table."""
    return tuple(table for table in COLLECTION_TABLES[collection] if table.owner_column is not None)


def parent_table(collection: str) -> TableSchema:
    """Return the top-level table of a collection."""
    return COLLECTION_TABLES[collection][0]

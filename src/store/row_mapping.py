"""Record to relational row mapping.

The full build and the patch generator both materialize records through
``map_record_rows`` so the two paths cannot drift apart. Child row keys
are derived from the owning record id and list position, which keeps
rebuilds deterministic.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from core.constants import HARDWARE, MANUFACTURERS, SOFTWARE
from core.errors import CatalogStoreError
from core.types import CatalogRecord
from registry.schema_registry import SchemaRegistry
from store.sqlite_schema import FTS_COLUMNS, FTS_TABLE, TABLES_BY_NAME


@dataclass(frozen=True)
class TableRow:
    """One row destined for a table, values in the table's column order."""

    table: str
    values: tuple[object, ...]

    @property
    def columns(self) -> tuple[str, ...]:
        return table_columns(self.table)

    def value(self, column: str) -> object:
        return self.values[self.columns.index(column)]


@dataclass(frozen=True)
class ManufacturerRef:
    """Identifier and display name of a manufacturer, keyed by slug elsewhere."""

    record_id: str
    name: str


@dataclass(frozen=True)
class MaterializationContext:
    """Lookups needed to materialize any single record.

    Attributes:
        registry: Vocabularies used to normalize categories.
        manufacturers: Manufacturer slug to identifier and name.
    """

    registry: SchemaRegistry
    manufacturers: Mapping[str, ManufacturerRef]

    @classmethod
    def from_records(
        cls,
        registry: SchemaRegistry,
        records: Iterable[CatalogRecord],
    ) -> "MaterializationContext":
        """Build lookups from the loaded dataset."""
        manufacturers = {
            record.slug: ManufacturerRef(record_id=_required_id(record), name=record.name)
            for record in records
            if record.collection == MANUFACTURERS
        }
        return cls(registry=registry, manufacturers=manufacturers)


def table_columns(table: str) -> tuple[str, ...]:
    """Return the insert column order of a table."""
    if table == FTS_TABLE:
        return FTS_COLUMNS
    return TABLES_BY_NAME[table].column_names


def map_record_rows(record: CatalogRecord, context: MaterializationContext) -> list[TableRow]:
    """Map one record to its parent, child and full-text rows.

    Args:
        record: Validated record.
        context: Dataset lookups.

    Returns:
        Rows in insert order: parent first, full-text row last.

    Raises:
        CatalogStoreError: If the record has no identifier or references
            an unknown manufacturer.
    """
    record_id = _required_id(record)
    if record.collection == MANUFACTURERS:
        return _manufacturer_rows(record, record_id, context)
    return _product_rows(record, record_id, context)


def _manufacturer_rows(
    record: CatalogRecord,
    record_id: str,
    context: MaterializationContext,
) -> list[TableRow]:
    data = record.data
    parent_slug = data.get("parentCompany")
    parent_ref = context.manufacturers.get(parent_slug) if isinstance(parent_slug, str) else None
    rows = [
        _row(
            "manufacturers",
            id=record_id,
            slug=record.slug,
            name=record.name,
            company_name=_text(data.get("companyName")),
            parent_company_id=parent_ref.record_id if parent_ref else None,
            website=_text(data.get("website")),
            description=_text(data.get("description")),
        )
    ]
    rows.extend(_common_rows("manufacturer", record_id, data))
    rows.append(
        _row(
            FTS_TABLE,
            id=record_id,
            slug=record.slug,
            collection=MANUFACTURERS,
            manufacturer_id=record_id,
            name=record.name,
            manufacturer_name=record.name,
            categories="",
            description=_text(data.get("description")),
        )
    )
    return rows


def _product_rows(
    record: CatalogRecord,
    record_id: str,
    context: MaterializationContext,
) -> list[TableRow]:
    data = record.data
    prefix = record.collection
    manufacturer = _manufacturer_ref(record, context)
    registry = context.registry
    primary = _category(data.get("primaryCategory"), registry)
    secondary = _category(data.get("secondaryCategory"), registry)
    categories = [
        registry.normalize_category(value)
        for value in _list(data.get("categories"))
        if isinstance(value, str)
    ]
    rows = [
        _row(
            prefix,
            id=record_id,
            slug=record.slug,
            name=record.name,
            manufacturer_id=manufacturer.record_id,
            primary_category=primary,
            secondary_category=secondary,
            website=_text(data.get("website")),
            description=_text(data.get("description")),
            details=_text(data.get("details")),
            specs=_text(data.get("specs")),
            release_date=_text(data.get("releaseDate")),
            release_date_year_only=_flag(data.get("releaseDateYearOnly")),
        )
    ]
    rows.extend(_common_rows(prefix, record_id, data))
    owner = f"{prefix}_id"
    for index, category in enumerate(categories):
        rows.append(
            _row(
                f"{prefix}_categories",
                id=f"{record_id}:categories:{index}",
                position=index,
                category=category,
                **{owner: record_id},
            )
        )
    rows.extend(_nested_rows(prefix, record_id, record_id, data))
    if record.collection == SOFTWARE:
        rows.extend(_software_rows(record_id, data))
    elif record.collection == HARDWARE:
        rows.extend(_hardware_rows(record_id, data))
    search_categories = list(dict.fromkeys(value for value in (primary, secondary, *categories) if value))
    rows.append(
        _row(
            FTS_TABLE,
            id=record_id,
            slug=record.slug,
            collection=record.collection,
            manufacturer_id=manufacturer.record_id,
            name=record.name,
            manufacturer_name=manufacturer.name,
            categories=" ".join(search_categories),
            description=_text(data.get("description")),
        )
    )
    return rows


def _common_rows(prefix: str, record_id: str, data: Mapping[str, object]) -> list[TableRow]:
    owner = {f"{prefix}_id": record_id}
    rows: list[TableRow] = []
    terms = [term for term in _list(data.get("searchTerms")) if isinstance(term, str)]
    for index, term in enumerate(terms):
        rows.append(
            _row(
                f"{prefix}_search_terms",
                id=f"{record_id}:search_terms:{index}",
                position=index,
                term=term,
                **owner,
            )
        )
    for index, image in enumerate(_mappings(data.get("images"))):
        rows.append(
            _row(
                f"{prefix}_images",
                id=f"{record_id}:images:{index}",
                position=index,
                src=_text(image.get("src")),
                alt=_text(image.get("alt")),
                **owner,
            )
        )
    translations = data.get("translations")
    if isinstance(translations, Mapping):
        for locale in sorted(str(key) for key in translations):
            rows.append(
                _row(
                    f"{prefix}_translations",
                    id=f"{record_id}:translations:{locale}",
                    locale=locale,
                    content=json.dumps(translations[locale], sort_keys=True, ensure_ascii=False),
                    **owner,
                )
            )
    return rows


def _nested_rows(
    prefix: str,
    record_id: str,
    parent_key: str,
    owner_data: Mapping[str, object],
) -> list[TableRow]:
    """Map versions, prices and links owned by a record, revision or version."""
    owner = {f"{prefix}_id": record_id}
    rows: list[TableRow] = []
    for index, version in enumerate(_mappings(owner_data.get("versions"))):
        version_key = f"{parent_key}:versions:{index}"
        rows.append(
            _row(
                f"{prefix}_versions",
                id=version_key,
                parent_key=parent_key,
                position=index,
                name=_text(version.get("name")),
                release_date=_text(version.get("releaseDate")),
                release_date_year_only=_flag(version.get("releaseDateYearOnly")),
                pre_release=_flag(version.get("preRelease")),
                unofficial=_flag(version.get("unofficial")),
                url=_text(version.get("url")),
                description=_text(version.get("description")),
                **owner,
            )
        )
        rows.extend(_price_and_link_rows(prefix, record_id, version_key, version))
    rows.extend(_price_and_link_rows(prefix, record_id, parent_key, owner_data))
    return rows


def _price_and_link_rows(
    prefix: str,
    record_id: str,
    parent_key: str,
    owner_data: Mapping[str, object],
) -> list[TableRow]:
    owner = {f"{prefix}_id": record_id}
    rows: list[TableRow] = []
    for index, price in enumerate(_mappings(owner_data.get("prices"))):
        rows.append(
            _row(
                f"{prefix}_prices",
                id=f"{parent_key}:prices:{index}",
                parent_key=parent_key,
                position=index,
                amount=_number(price.get("amount")),
                currency=_text(price.get("currency")),
                as_of=_text(price.get("asOf")),
                source=_text(price.get("source")),
                **owner,
            )
        )
    for index, link in enumerate(_mappings(owner_data.get("links"))):
        rows.append(
            _row(
                f"{prefix}_links",
                id=f"{parent_key}:links:{index}",
                parent_key=parent_key,
                position=index,
                type=_text(link.get("type")),
                title=_text(link.get("title")),
                url=_text(link.get("url")),
                video_id=_text(link.get("videoId")),
                provider=_text(link.get("provider")),
                description=_text(link.get("description")),
                **owner,
            )
        )
    return rows


def _software_rows(record_id: str, data: Mapping[str, object]) -> list[TableRow]:
    identifiers = data.get("identifiers")
    identifier_map = identifiers if isinstance(identifiers, Mapping) else {}
    formats = [value for value in _list(data.get("formats")) if isinstance(value, str)]
    formats.extend(str(key) for key in identifier_map if key not in formats)
    rows = [
        _row(
            "software_formats",
            id=f"{record_id}:formats:{index}",
            software_id=record_id,
            position=index,
            format=format_name,
            identifier=_text(identifier_map.get(format_name)),
        )
        for index, format_name in enumerate(formats)
    ]
    platforms = [value for value in _list(data.get("platforms")) if isinstance(value, str)]
    rows.extend(
        _row(
            "software_platforms",
            id=f"{record_id}:platforms:{index}",
            software_id=record_id,
            position=index,
            platform=platform,
        )
        for index, platform in enumerate(platforms)
    )
    return rows


def _hardware_rows(record_id: str, data: Mapping[str, object]) -> list[TableRow]:
    """Map device IO and revisions.

    A revision with its own ``io`` list uses only that list; otherwise it
    receives a copy of the device IO.
    """
    device_io = _mappings(data.get("io"))
    rows = [
        _io_row(record_id, f"{record_id}:io:{index}", None, index, io_entry)
        for index, io_entry in enumerate(device_io)
    ]
    for index, revision in enumerate(_mappings(data.get("revisions"))):
        revision_key = f"{record_id}:revisions:{index}"
        has_own_io = isinstance(revision.get("io"), list)
        rows.append(
            _row(
                "hardware_revisions",
                id=revision_key,
                hardware_id=record_id,
                position=index,
                name=_text(revision.get("name")),
                release_date=_text(revision.get("releaseDate")),
                release_date_year_only=_flag(revision.get("releaseDateYearOnly")),
                url=_text(revision.get("url")),
                description=_text(revision.get("description")),
                has_own_io=int(has_own_io),
            )
        )
        revision_io = _mappings(revision.get("io")) if has_own_io else device_io
        rows.extend(
            _io_row(record_id, f"{revision_key}:io:{io_index}", revision_key, io_index, io_entry)
            for io_index, io_entry in enumerate(revision_io)
        )
        rows.extend(_nested_rows(HARDWARE, record_id, revision_key, revision))
    return rows


def _io_row(
    record_id: str,
    row_key: str,
    revision_key: str | None,
    position: int,
    io_entry: Mapping[str, object],
) -> TableRow:
    return _row(
        "hardware_io",
        id=row_key,
        hardware_id=record_id,
        revision_id=revision_key,
        position=position,
        name=_text(io_entry.get("name")),
        signal_flow=_text(io_entry.get("signalFlow")),
        category=_text(io_entry.get("category")),
        type=_text(io_entry.get("type")),
        connection=_text(io_entry.get("connection")),
        max_connections=_integer(io_entry.get("maxConnections")),
        position_label=_text(io_entry.get("position")),
        column_position=_integer(io_entry.get("columnPosition")),
        row_position=_integer(io_entry.get("rowPosition")),
        description=_text(io_entry.get("description")),
    )


def _row(table: str, **values: object) -> TableRow:
    columns = table_columns(table)
    unknown = set(values) - set(columns)
    if unknown:
        raise CatalogStoreError(
            f"Unknown columns for table '{table}': {', '.join(sorted(unknown))}. "
            "Update store.sqlite_schema together with the row mapping."
        )
    return TableRow(table=table, values=tuple(values.get(column) for column in columns))


def _required_id(record: CatalogRecord) -> str:
    record_id = record.record_id
    if not record_id:
        raise CatalogStoreError(
            f"Record {record.collection}/{record.slug} has no id. "
            "Run 'catalog assign-ids' before building the database."
        )
    return record_id


def _manufacturer_ref(record: CatalogRecord, context: MaterializationContext) -> ManufacturerRef:
    slug = record.manufacturer_slug
    reference = context.manufacturers.get(slug) if slug else None
    if reference is None:
        raise CatalogStoreError(
            f"Record {record.collection}/{record.slug} references unknown manufacturer "
            f"'{slug}'. Run 'catalog validate' and fix the reference before building."
        )
    return reference


def _category(value: object, registry: SchemaRegistry) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return registry.normalize_category(value)


def _list(value: object) -> list[object]:
    return value if isinstance(value, list) else []


def _mappings(value: object) -> Sequence[Mapping[str, object]]:
    return [item for item in _list(value) if isinstance(item, Mapping)]


def _text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def _flag(value: object) -> int | None:
    if isinstance(value, bool):
        return int(value)
    return None


def _integer(value: object) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _number(value: object) -> float | int | None:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None

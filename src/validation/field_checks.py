"""Structural field checks.

This module checks required fields, field types, URL and date shapes,
the year-only release date rule, and the slug/filename relationship for
every record collection and its nested shapes. Unknown keys are ignored.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence
from urllib.parse import urlsplit

from core.constants import HARDWARE, MANUFACTURERS, RELEASE_DATE_PATTERN, SOFTWARE, YEAR_ONLY_PATTERN
from core.error_codes import AutoFix, ValidationErrorCode
from transforms.slugs import generate_slug, is_valid_slug_format
from validation.issue_collector import IssueCollector, child_path
from validation.link_checks import check_video_url
from validation.markup_checks import check_markup

Code = ValidationErrorCode

_IO_REQUIRED_FIELDS = ("name", "signalFlow", "category", "type", "connection")
_IO_INT_FIELDS = ("maxConnections", "columnPosition", "rowPosition")


def check_record_structure(
    data: Mapping[str, object],
    collection: str,
    slug: str,
    collector: IssueCollector,
) -> None:
    """Check one parsed record's structure.

    Args:
        data: Parsed record mapping.
        collection: Owning collection.
        slug: Authoritative slug from the filename.
        collector: Destination for issues.
    """
    _check_slug(data, slug, collector)
    _check_name(data, collector)
    _check_common_fields(data, collector)
    if collection == MANUFACTURERS:
        _optional_string(data, "companyName", "", collector)
        parent_company = _optional_string(data, "parentCompany", "", collector)
        if parent_company is not None and not is_valid_slug_format(parent_company):
            collector.add(
                Code.E102_INVALID_SLUG_FORMAT,
                f"parentCompany '{parent_company}' is not a valid manufacturer slug.",
                "parentCompany",
            )
        return
    _check_product_fields(data, collector)
    if collection == SOFTWARE:
        _optional_string_list(data, "formats", "", collector)
        _optional_string_list(data, "platforms", "", collector)
        _check_identifiers_shape(data, collector)
    elif collection == HARDWARE:
        for index, io_entry in _mapping_items(data, "io", "", collector):
            check_io_entry(io_entry, child_path("io", index), collector)
        for index, revision in _mapping_items(data, "revisions", "", collector):
            _check_revision(revision, child_path("revisions", index), collector)


def is_valid_url(value: str) -> bool:
    """Return whether a value is an absolute http(s) URL with a host."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc) and " " not in value


def check_io_entry(io_entry: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    """Check one IO port mapping."""
    for field_name in _IO_REQUIRED_FIELDS:
        _required_string(io_entry, field_name, path, collector)
    for field_name in _IO_INT_FIELDS:
        _optional_int(io_entry, field_name, path, collector)
    _optional_string(io_entry, "position", path, collector)
    _optional_string(io_entry, "description", path, collector)


def _check_slug(data: Mapping[str, object], slug: str, collector: IssueCollector) -> None:
    if not is_valid_slug_format(slug):
        suggested = generate_slug(slug)
        collector.add(
            Code.E102_INVALID_SLUG_FORMAT,
            f"Filename slug '{slug}' is invalid. Slugs use lowercase letters, numbers, "
            "and inner hyphens only.",
            "(root)",
            auto_fix=AutoFix("rename", f"Rename the file to '{suggested}.yaml'", slug, suggested)
            if suggested
            else None,
        )
    if "slug" not in data:
        return
    declared = data["slug"]
    if not isinstance(declared, str):
        collector.add(Code.E101_INVALID_FIELD_TYPE, "Field 'slug' must be a string.", "slug")
    elif declared != slug:
        collector.add(
            Code.E109_SLUG_FILENAME_MISMATCH,
            f"Slug '{declared}' does not match filename slug '{slug}'. "
            "The filename is authoritative.",
            "slug",
            auto_fix=AutoFix("remove", "Remove the 'slug' field", declared, None, "slug"),
        )


def _check_name(data: Mapping[str, object], collector: IssueCollector) -> None:
    name = _required_string(data, "name", "", collector)
    if name is not None and not name.strip():
        collector.add(Code.E100_MISSING_REQUIRED_FIELD, "Name is required.", "name")


def _check_common_fields(data: Mapping[str, object], collector: IssueCollector) -> None:
    _optional_url(data, "website", "", collector)
    _optional_markup(data, "description", "", collector)
    _optional_string_list(data, "searchTerms", "", collector)
    for index, image in _mapping_items(data, "images", "", collector):
        image_path = child_path("images", index)
        src = _required_string(image, "src", image_path, collector)
        if src is not None and not is_valid_url(src):
            collector.add(
                Code.E103_INVALID_URL_FORMAT,
                f"Invalid URL '{src}'.",
                child_path(image_path, "src"),
            )
        _optional_string(image, "alt", image_path, collector)


def _check_product_fields(data: Mapping[str, object], collector: IssueCollector) -> None:
    manufacturer = _required_string(data, "manufacturer", "", collector)
    if manufacturer is not None and not manufacturer.strip():
        collector.add(
            Code.E100_MISSING_REQUIRED_FIELD,
            "Manufacturer reference is required.",
            "manufacturer",
        )
    _optional_string_list(data, "categories", "", collector)
    _optional_string(data, "primaryCategory", "", collector)
    _optional_string(data, "secondaryCategory", "", collector)
    _check_release_date(data, "", collector)
    _optional_markup(data, "details", "", collector)
    _optional_markup(data, "specs", "", collector)
    for index, version in _mapping_items(data, "versions", "", collector):
        _check_version(version, child_path("versions", index), collector)
    _check_prices(data, "", collector)
    _check_links(data, "", collector)


def _check_identifiers_shape(data: Mapping[str, object], collector: IssueCollector) -> None:
    identifiers = data.get("identifiers")
    if identifiers is None:
        return
    if not isinstance(identifiers, Mapping):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            "Field 'identifiers' must be a mapping of format to identifier.",
            "identifiers",
        )
        return
    for format_name, value in identifiers.items():
        if not isinstance(value, str):
            collector.add(
                Code.E101_INVALID_FIELD_TYPE,
                f"Identifier for format '{format_name}' must be a string.",
                child_path("identifiers", str(format_name)),
            )


def _check_version(version: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    _required_string(version, "name", path, collector)
    _check_release_date(version, path, collector)
    _optional_bool(version, "preRelease", path, collector)
    _optional_bool(version, "unofficial", path, collector)
    _optional_url(version, "url", path, collector)
    _optional_string(version, "description", path, collector)
    _check_prices(version, path, collector)
    _check_links(version, path, collector)


def _check_revision(revision: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    _required_string(revision, "name", path, collector)
    _check_release_date(revision, path, collector)
    _optional_url(revision, "url", path, collector)
    _optional_string(revision, "description", path, collector)
    for index, io_entry in _mapping_items(revision, "io", path, collector):
        check_io_entry(io_entry, child_path(child_path(path, "io"), index), collector)
    for index, version in _mapping_items(revision, "versions", path, collector):
        _check_version(version, child_path(child_path(path, "versions"), index), collector)
    _check_prices(revision, path, collector)
    _check_links(revision, path, collector)


def _check_prices(owner: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    for index, price in _mapping_items(owner, "prices", path, collector):
        price_path = child_path(child_path(path, "prices"), index)
        if price.get("amount") is None:
            collector.add(
                Code.E100_MISSING_REQUIRED_FIELD,
                "Missing required field 'amount'.",
                child_path(price_path, "amount"),
            )
        elif isinstance(price["amount"], bool) or not isinstance(price["amount"], (int, float)):
            collector.add(
                Code.E101_INVALID_FIELD_TYPE,
                "Field 'amount' must be a number.",
                child_path(price_path, "amount"),
            )
        _required_string(price, "currency", price_path, collector)
        as_of = _optional_string(price, "asOf", price_path, collector)
        if as_of is not None and not _is_calendar_date(as_of, require_day=True):
            collector.add(
                Code.E108_INVALID_DATE_FORMAT,
                f"Invalid date '{as_of}'. Use YYYY-MM-DD.",
                child_path(price_path, "asOf"),
            )
        _optional_string(price, "source", price_path, collector)


def _check_links(owner: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    for index, link in _mapping_items(owner, "links", path, collector):
        link_path = child_path(child_path(path, "links"), index)
        _required_string(link, "type", link_path, collector)
        for field_name in ("title", "videoId", "provider", "description"):
            _optional_string(link, field_name, link_path, collector)
        url = _optional_url(link, "url", link_path, collector)
        if url is not None:
            check_video_url(url, child_path(link_path, "url"), collector)


def _check_release_date(owner: Mapping[str, object], path: str, collector: IssueCollector) -> None:
    date_path = child_path(path, "releaseDate")
    flag_path = child_path(path, "releaseDateYearOnly")
    release_date = owner.get("releaseDate")
    year_only = _optional_bool(owner, "releaseDateYearOnly", path, collector)
    if isinstance(release_date, int) and not isinstance(release_date, bool):
        year_text = str(release_date)
        collector.add(
            Code.E108_INVALID_DATE_FORMAT,
            f"releaseDate {release_date} must be a quoted string.",
            date_path,
            auto_fix=AutoFix(
                "replace",
                f"Quote the value as '{year_text}'",
                year_text,
                f"'{year_text}'",
                date_path,
            ),
        )
        return
    if release_date is not None and not isinstance(release_date, str):
        collector.add(Code.E101_INVALID_FIELD_TYPE, "Field 'releaseDate' must be a string.", date_path)
        return
    if year_only:
        if release_date is None or YEAR_ONLY_PATTERN.fullmatch(release_date) is None:
            collector.add(
                Code.E108_INVALID_DATE_FORMAT,
                "releaseDateYearOnly requires releaseDate in YYYY format.",
                flag_path,
            )
        return
    if release_date is None:
        return
    if YEAR_ONLY_PATTERN.fullmatch(release_date) is not None:
        collector.add(
            Code.E108_INVALID_DATE_FORMAT,
            f"Year-only releaseDate '{release_date}' requires releaseDateYearOnly: true.",
            date_path,
            auto_fix=AutoFix("add", "Add 'releaseDateYearOnly: true'", None, "true", flag_path),
        )
        return
    if not _is_calendar_date(release_date, require_day=False):
        collector.add(
            Code.E108_INVALID_DATE_FORMAT,
            f"Invalid releaseDate '{release_date}'. Use YYYY-MM-DD, YYYY-MM, or YYYY.",
            date_path,
        )


def _is_calendar_date(value: str, require_day: bool) -> bool:
    if RELEASE_DATE_PATTERN.fullmatch(value) is None:
        return False
    parts = [int(part) for part in value.split("-")]
    if require_day and len(parts) != 3:
        return False
    if len(parts) == 1:
        return True
    try:
        date(parts[0], parts[1], parts[2] if len(parts) == 3 else 1)
    except ValueError:
        return False
    return True


def _required_string(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> str | None:
    field_path = child_path(path, field_name)
    value = owner.get(field_name)
    if value is None:
        collector.add(
            Code.E100_MISSING_REQUIRED_FIELD,
            f"Missing required field '{field_name}'.",
            field_path,
        )
        return None
    if not isinstance(value, str):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            f"Field '{field_name}' must be a string, got {type(value).__name__}.",
            field_path,
        )
        return None
    return value


def _optional_string(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> str | None:
    value = owner.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            f"Field '{field_name}' must be a string, got {type(value).__name__}.",
            child_path(path, field_name),
        )
        return None
    return value


def _optional_url(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> str | None:
    value = _optional_string(owner, field_name, path, collector)
    if value is not None and not is_valid_url(value):
        collector.add(
            Code.E103_INVALID_URL_FORMAT,
            f"Invalid URL '{value}'.",
            child_path(path, field_name),
        )
        return None
    return value


def _optional_markup(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> None:
    value = _optional_string(owner, field_name, path, collector)
    if value:
        check_markup(value, child_path(path, field_name), collector)


def _optional_bool(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> bool | None:
    value = owner.get(field_name)
    if value is None:
        return None
    if not isinstance(value, bool):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            f"Field '{field_name}' must be true or false.",
            child_path(path, field_name),
        )
        return None
    return value


def _optional_int(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> None:
    value = owner.get(field_name)
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, int):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            f"Field '{field_name}' must be an integer.",
            child_path(path, field_name),
        )


def _optional_string_list(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> None:
    values = _optional_list(owner, field_name, path, collector)
    for index, value in enumerate(values):
        if not isinstance(value, str):
            collector.add(
                Code.E101_INVALID_FIELD_TYPE,
                f"Entries of '{field_name}' must be strings, got {type(value).__name__}.",
                child_path(child_path(path, field_name), index),
            )


def _optional_list(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> Sequence[object]:
    value = owner.get(field_name)
    if value is None:
        return ()
    if not isinstance(value, list):
        collector.add(
            Code.E101_INVALID_FIELD_TYPE,
            f"Field '{field_name}' must be a list.",
            child_path(path, field_name),
        )
        return ()
    return value


def _mapping_items(
    owner: Mapping[str, object], field_name: str, path: str, collector: IssueCollector
) -> list[tuple[int, Mapping[str, object]]]:
    items: list[tuple[int, Mapping[str, object]]] = []
    for index, value in enumerate(_optional_list(owner, field_name, path, collector)):
        if isinstance(value, Mapping):
            items.append((index, value))
        else:
            collector.add(
                Code.E101_INVALID_FIELD_TYPE,
                f"Entries of '{field_name}' must be mappings.",
                child_path(child_path(path, field_name), index),
            )
    return items

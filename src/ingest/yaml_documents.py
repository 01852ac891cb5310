"""YAML parsing with source-position recovery.

Records are parsed once into both a Python payload and the composed node
graph. The node graph maps logical field paths such as ``categories.0``
back to one-based source lines and columns.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from core.errors import CatalogDependencyError, CatalogIngestError, CatalogYamlSyntaxError

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


@dataclass(frozen=True)
class SourcePosition:
    """One-based source position of a YAML node."""

    line: int
    column: int


@dataclass(frozen=True)
class ParsedDocument:
    """Parsed YAML payload plus its composed node graph.

    Attributes:
        payload: Constructed Python value.
        root_node: Composed root node, or None for an empty document.
    """

    payload: object
    root_node: Any

    def position_for(self, path: Sequence[str | int]) -> SourcePosition | None:
        """Resolve the source position of a logical field path.

        Args:
            path: Field path parts, e.g. ``["links", 2, "url"]``.

        Returns:
            Position of the deepest node reached, or None without a node graph.
        """
        if self.root_node is None:
            return None
        node = _walk_node_path(self.root_node, path)
        mark = node.start_mark
        return SourcePosition(line=mark.line + 1, column=mark.column + 1)


def parse_yaml_text(text: str) -> ParsedDocument:
    """Parse YAML text keeping dates as plain strings.

    Args:
        text: Raw YAML document text.

    Returns:
        Parsed document with node graph.

    Raises:
        CatalogYamlSyntaxError: If the text is not well-formed YAML.
    """
    yaml = _import_yaml()
    loader = _date_as_string_loader()(text)
    try:
        root_node = loader.get_single_node()
        payload = loader.construct_document(root_node) if root_node is not None else None
    except yaml.MarkedYAMLError as error:
        mark = error.problem_mark or error.context_mark
        line = mark.line + 1 if mark is not None else None
        column = mark.column + 1 if mark is not None else None
        problem = error.problem or error.context or "malformed document"
        raise CatalogYamlSyntaxError(
            f"YAML syntax error: {problem}", line=line, column=column
        ) from error
    except yaml.YAMLError as error:
        raise CatalogYamlSyntaxError(f"YAML syntax error: {error}") from error
    finally:
        loader.dispose()
    return ParsedDocument(payload=payload, root_node=root_node)


def decode_yaml_bytes(data: bytes, label: str) -> str:
    """Decode raw YAML bytes as UTF-8.

    Args:
        data: Raw file content.
        label: File name used in error messages.

    Returns:
        Decoded text.

    Raises:
        CatalogYamlSyntaxError: If the bytes are not valid UTF-8, with the
            line and column of the first bad byte.
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as error:
        preceding = data[: error.start]
        line = preceding.count(b"\n") + 1
        column = error.start - (preceding.rfind(b"\n") + 1) + 1
        raise CatalogYamlSyntaxError(
            f"{label} is not valid UTF-8 (byte 0x{data[error.start]:02x}). "
            "Save the file with UTF-8 encoding.",
            line=line,
            column=column,
        ) from error


def read_yaml_text(file_path: Path, label: str) -> str:
    """Read a YAML file as UTF-8 text.

    Raises:
        CatalogIngestError: If the file cannot be read.
        CatalogYamlSyntaxError: If the content is not valid UTF-8.
    """
    try:
        data = file_path.read_bytes()
    except OSError as error:
        raise CatalogIngestError(
            f"Failed to read {label}: {error}. Check file permissions and retry."
        ) from error
    return decode_yaml_bytes(data, label)


def load_yaml_file(file_path: Path) -> object:
    """Load one YAML file into a Python value.

    Args:
        file_path: YAML file path.

    Returns:
        Parsed payload, None for an empty file.

    Raises:
        CatalogIngestError: If the file cannot be read or parsed.
    """
    try:
        text = read_yaml_text(file_path, file_path.name)
        return parse_yaml_text(text).payload
    except CatalogYamlSyntaxError as error:
        location = f" (line {error.line})" if error.line is not None else ""
        raise CatalogIngestError(
            f"Failed to parse YAML file at {file_path}{location}: {error}. Fix YAML syntax and retry."
        ) from error


def parse_error_path(dotted_path: str) -> list[str | int]:
    """Split a dotted field path into keys and list indices.

    ``links.2.url`` becomes ``["links", 2, "url"]``.
    """
    if not dotted_path or dotted_path.startswith("("):
        return []
    parts: list[str | int] = []
    for part in dotted_path.split("."):
        parts.append(int(part) if part.isdigit() else part)
    return parts


def _walk_node_path(root_node: Any, path: Sequence[str | int]) -> Any:
    yaml = _import_yaml()
    node = root_node
    for part in path:
        if isinstance(node, yaml.MappingNode):
            child = None
            for key_node, value_node in node.value:
                if getattr(key_node, "value", None) == str(part):
                    child = value_node
                    break
            if child is None:
                return node
            node = child
        elif isinstance(node, yaml.SequenceNode) and isinstance(part, int):
            if part >= len(node.value):
                return node
            node = node.value[part]
        else:
            return node
    return node


def _import_yaml() -> Any:
    try:
        import yaml  # type: ignore[import-untyped]
    except ImportError as error:  # pragma: no cover - dependency failure
        raise CatalogDependencyError(
            "Record parsing requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    return yaml


@lru_cache(maxsize=1)
def _date_as_string_loader() -> Any:
    yaml = _import_yaml()

    class DateAsStringLoader(yaml.SafeLoader):  # type: ignore[misc,name-defined]
        """Safe loader that leaves ISO dates as strings."""

    DateAsStringLoader.yaml_implicit_resolvers = {
        first_char: [
            (tag, pattern) for tag, pattern in resolvers if tag != _TIMESTAMP_TAG
        ]
        for first_char, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
    }
    return DateAsStringLoader

"""Shared catalog fixture writers for tests."""

from __future__ import annotations

import copy
import subprocess
from pathlib import Path
from typing import Mapping

import yaml

from core.config import CatalogConfig

ACME_ID = "AcmeManufacturer00001"
BETA_ID = "BetaManufacturer00002"
SYNTH_ID = "AcmeSynthSoftware0001"
BOX_ID = "AcmeBoxHardware000001"

SCHEMA_FILES: dict[str, object] = {
    "categories.yaml": {
        "categories": ["synthesizer", "effect", "sampler", "drum-machine", "audio-interface"],
    },
    "category-aliases.yaml": {"aliases": {"synth": "synthesizer", "fx": "effect"}},
    "formats.yaml": {"formats": ["vst3", "au", "aax", "clap", "lv2", "standalone"]},
    "platforms.yaml": {"platforms": ["mac", "windows", "linux"]},
    "locales.yaml": {
        "locales": [
            {"code": "de", "name": "German", "nativeName": "Deutsch"},
            {"code": "fr", "name": "French", "nativeName": "Français"},
        ],
    },
}

_DEVICE_IO = [
    {
        "name": "Main Out L",
        "signalFlow": "output",
        "category": "audio",
        "type": "line",
        "connection": "jack-6.35mm",
        "maxConnections": 1,
    },
    {
        "name": "MIDI In",
        "signalFlow": "input",
        "category": "midi",
        "type": "midi",
        "connection": "din-5",
    },
]

BASE_RECORDS: dict[str, dict[str, dict[str, object]]] = {
    "manufacturers": {
        "acme": {
            "id": ACME_ID,
            "name": "Acme Audio",
            "website": "https://acme.example.com",
            "description": "Makers of `fine` instruments.",
            "searchTerms": ["acme"],
        },
        "beta": {
            "id": BETA_ID,
            "name": "Beta Labs",
            "parentCompany": "acme",
        },
    },
    "software": {
        "acme-synth": {
            "id": SYNTH_ID,
            "name": "Acme Synth",
            "manufacturer": "acme",
            "primaryCategory": "synth",
            "categories": ["effect"],
            "formats": ["vst3", "au"],
            "identifiers": {"vst3": "com.acme.Synth", "au": "com.acme.Synth"},
            "platforms": ["mac", "windows"],
            "releaseDate": "2021-04-01",
            "versions": [
                {
                    "name": "1.0",
                    "releaseDate": "2021",
                    "releaseDateYearOnly": True,
                    "prices": [{"amount": 99, "currency": "USD", "asOf": "2021-04-01"}],
                },
            ],
            "prices": [{"amount": 149.5, "currency": "USD"}],
            "links": [{"type": "video", "url": "https://www.youtube.com/watch?v=abc123"}],
            "translations": {"de": {"description": "Ein Synthesizer."}},
        },
    },
    "hardware": {
        "acme-box": {
            "id": BOX_ID,
            "name": "Acme Box",
            "manufacturer": "acme",
            "categories": ["drum-machine"],
            "io": _DEVICE_IO,
            "revisions": [
                {"name": "MkI", "releaseDate": "2019-05"},
                {
                    "name": "MkII",
                    "io": [
                        {
                            "name": "USB",
                            "signalFlow": "bidirectional",
                            "category": "digital",
                            "type": "usb",
                            "connection": "usb-c",
                        },
                    ],
                },
            ],
            "translations": {"fr": {"io": [{"originalName": "MIDI In", "name": "Entrée MIDI"}]}},
        },
    },
}


def base_records() -> dict[str, dict[str, dict[str, object]]]:
    """Return a deep copy of the valid base dataset."""
    return copy.deepcopy(BASE_RECORDS)


def write_schema(schema_root: Path, overrides: Mapping[str, object] | None = None) -> Path:
    """Write vocabulary files, optionally replacing some of them."""
    schema_root.mkdir(parents=True, exist_ok=True)
    files = dict(SCHEMA_FILES)
    files.update(overrides or {})
    for file_name, payload in files.items():
        (schema_root / file_name).write_text(
            yaml.safe_dump(payload, sort_keys=False, allow_unicode=True),
            encoding="utf-8",
        )
    return schema_root


def write_record(
    data_root: Path,
    collection: str,
    slug: str,
    payload: Mapping[str, object] | str,
) -> Path:
    """Write one record file from a mapping or raw YAML text."""
    record_path = data_root / collection / f"{slug}.yaml"
    record_path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(payload, str):
        text = payload
    else:
        text = yaml.safe_dump(dict(payload), sort_keys=False, allow_unicode=True)
    record_path.write_text(text, encoding="utf-8")
    return record_path


def write_records(
    data_root: Path,
    records: Mapping[str, Mapping[str, Mapping[str, object] | str]],
) -> None:
    """Write every record of a ``{collection: {slug: payload}}`` mapping."""
    for collection, entries in records.items():
        (data_root / collection).mkdir(parents=True, exist_ok=True)
        for slug, payload in entries.items():
            write_record(data_root, collection, slug, payload)


def build_catalog_repo(
    repo_root: Path,
    records: Mapping[str, Mapping[str, Mapping[str, object] | str]] | None = None,
) -> CatalogConfig:
    """Create a catalog repository with schema and records.

    Args:
        repo_root: Empty directory receiving the repository.
        records: Records to write; defaults to the valid base dataset.

    Returns:
        Config rooted at the new repository.
    """
    config = CatalogConfig.for_repo_root(repo_root)
    write_schema(config.schema_dir)
    write_records(config.data_dir, base_records() if records is None else records)
    return config


def commit_and_tag(repo_root: Path, tag: str) -> None:
    """Initialize git in a repository, commit every file, and tag the commit."""
    git = [
        "git",
        "-c",
        "user.name=Test",
        "-c",
        "user.email=test@example.com",
        "-c",
        "commit.gpgsign=false",
    ]
    subprocess.run(["git", "init", "-q"], cwd=repo_root, check=True)
    subprocess.run(["git", "add", "."], cwd=repo_root, check=True)
    subprocess.run([*git, "commit", "-q", "-m", "baseline"], cwd=repo_root, check=True)
    subprocess.run(["git", "tag", tag], cwd=repo_root, check=True)

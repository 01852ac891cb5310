"""Integration test: a contribution from slug check to searchable build."""

from __future__ import annotations

import sqlite3

from cli.main import main
from tests.catalog_fixtures import build_catalog_repo, write_record


def test_new_record_flows_through_every_command(tmp_path, capsys) -> None:
    """A new record should pass checks, receive an id and become searchable."""
    config = build_catalog_repo(tmp_path)
    repo_args = ["--repo-root", str(tmp_path)]
    slug_exit = main([*repo_args, "check-slugs", "pulse-verb", "--collection", "software"])
    write_record(
        config.data_dir,
        "software",
        "pulse-verb",
        "name: Pulse Verb\nmanufacturer: acme\nprimaryCategory: fx\ndescription: A shimmering `reverb`.\n",
    )
    strict_exit_before = main([*repo_args, "validate", "--require-ids"])
    assign_exit = main([*repo_args, "assign-ids"])
    strict_exit_after = main([*repo_args, "validate", "--require-ids"])
    build_exit = main([*repo_args, "build", "--catalog-version", "5"])
    capsys.readouterr()

    with sqlite3.connect(config.database_path) as connection:
        matches = connection.execute(
            "SELECT slug, categories FROM catalog_fts WHERE catalog_fts MATCH 'reverb'"
        ).fetchall()
        version = connection.execute("SELECT value FROM catalog_meta WHERE key = 'version'").fetchone()[0]

    exits = (slug_exit, strict_exit_before, assign_exit, strict_exit_after, build_exit)
    assert (exits, matches, version) == ((0, 1, 0, 0, 0), [("pulse-verb", "effect")], "5")

from __future__ import annotations

from typing import Any, Dict, Iterable, MutableMapping

import tomlkit
from tomlkit import TOMLDocument
from tomlkit.items import InlineTable

WEE_ALLOC_VERSION = "0.4"
FLUENT_BUNDLE = "fluent-bundle"
FLUENT_BUNDLE_OPT_LEVEL = 2
# The lib target loses its cdylib declaration unless it is written back
# explicitly on every run. Not yet understood, so kept separate for review.
LIB_CRATE_TYPES = ("cdylib", "rlib")
# Sections the optimizer writes into; each must be a table when present.
TABLE_SECTIONS = (("profile",), ("profile", "release"), ("dependencies",), ("lib",))


def parse_manifest(text: str) -> TOMLDocument:
    """Parse manifest text, preserving comments and layout for the dump."""
    return tomlkit.parse(text)


def dump_manifest(doc: TOMLDocument) -> str:
    return tomlkit.dumps(doc)


def check_manifest_shape(doc: TOMLDocument) -> None:
    """Raise `ValueError` if a section the optimizer writes into is not a table."""
    for section in TABLE_SECTIONS:
        node: Any = doc
        for depth, key in enumerate(section):
            node = node.get(key)
            if node is None:
                break
            if not isinstance(node, MutableMapping):
                name = ".".join(section[: depth + 1])
                raise ValueError(f"Expected `{name}` to be a table, found {type(node).__name__}")


def _new_table(parent: MutableMapping[str, Any], super_table: bool = False) -> MutableMapping[str, Any]:
    # Inline tables can only hold inline tables.
    if isinstance(parent, InlineTable):
        return tomlkit.inline_table()
    return tomlkit.table(is_super_table=super_table or None)


def _child_table(parent: MutableMapping[str, Any], key: str, super_table: bool = False) -> MutableMapping[str, Any]:
    table = parent.get(key)
    if table is None:
        parent[key] = _new_table(parent, super_table)
        table = parent[key]
    if not isinstance(table, MutableMapping):
        raise ValueError(f"Expected `{key}` to be a table, found {type(table).__name__}")
    return table


def release_profile(doc: TOMLDocument) -> MutableMapping[str, Any]:
    """Return `[profile.release]`, creating it (and `[profile]`) when absent."""
    profile = _child_table(doc, "profile", super_table=True)
    return _child_table(profile, "release")


def set_release_settings(doc: TOMLDocument, opt_level: str, lto: bool, codegen_units: int) -> None:
    release = release_profile(doc)
    release["opt-level"] = opt_level
    release["lto"] = lto
    release["codegen-units"] = codegen_units


def set_fluent_bundle_patch(doc: TOMLDocument) -> None:
    # Replaces the whole per-package override table; earlier overrides are dropped.
    release = release_profile(doc)
    package = _new_table(release, super_table=True)
    patch = _new_table(package)
    patch["opt-level"] = FLUENT_BUNDLE_OPT_LEVEL
    package[FLUENT_BUNDLE] = patch
    release["package"] = package


def set_dependency(doc: TOMLDocument, name: str, version: str) -> None:
    # Simple `name = "version"` form; any richer existing declaration is overwritten.
    _child_table(doc, "dependencies")[name] = version


def set_lib_crate_types(doc: TOMLDocument, crate_types: Iterable[str] = LIB_CRATE_TYPES) -> None:
    _child_table(doc, "lib")["crate-type"] = list(crate_types)


def manifest_values(doc: TOMLDocument) -> Dict[str, Any]:
    """Plain-Python copy of the document, for logging and inspection."""
    return doc.unwrap()

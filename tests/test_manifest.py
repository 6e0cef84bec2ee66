import tomllib

import pytest

from sizeopt.manifest.cargo_manifest import (
    check_manifest_shape,
    dump_manifest,
    manifest_values,
    parse_manifest,
    release_profile,
    set_dependency,
    set_fluent_bundle_patch,
    set_lib_crate_types,
)


def test_release_profile_created_under_existing_profile():
    doc = parse_manifest('[profile.dev]\nopt-level = 1\n')
    release_profile(doc)["lto"] = True

    data = tomllib.loads(dump_manifest(doc))
    assert data["profile"] == {"dev": {"opt-level": 1}, "release": {"lto": True}}


def test_set_dependency_creates_table():
    doc = parse_manifest('[package]\nname = "engine"\n')
    set_dependency(doc, "wee_alloc", "0.4")
    set_lib_crate_types(doc)

    assert manifest_values(doc) == {
        "package": {"name": "engine"},
        "dependencies": {"wee_alloc": "0.4"},
        "lib": {"crate-type": ["cdylib", "rlib"]},
    }


def test_inline_profile_gets_inline_children():
    doc = parse_manifest("profile = { dev = { opt-level = 1 } }\n")
    set_fluent_bundle_patch(doc)

    data = tomllib.loads(dump_manifest(doc))
    assert data["profile"] == {
        "dev": {"opt-level": 1},
        "release": {"package": {"fluent-bundle": {"opt-level": 2}}},
    }


@pytest.mark.parametrize(
    "text, section",
    [
        ('lib = "broken"\n', "lib"),
        ("profile = 5\n", "profile"),
        ('dependencies = ["x"]\n', "dependencies"),
        ('profile = { release = "fast" }\n', "profile.release"),
        ('[[lib]]\nname = "engine"\n', "lib"),
    ],
)
def test_non_table_section_rejected(text, section):
    with pytest.raises(ValueError, match=f"`{section}`"):
        check_manifest_shape(parse_manifest(text))


def test_shape_check_accepts_missing_sections():
    check_manifest_shape(parse_manifest('[package]\nname = "engine"\n'))

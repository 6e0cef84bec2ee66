from pathlib import Path

import pytest

from sizeopt.options.size_opts import SizeOpts
from sizeopt.utils.config import AppConfig, deep_merge, options_from_config


def test_deep_merge_nested():
    merged = deep_merge({"size_opt": {"preset": "default", "overrides": {"lto": False}}}, {"size_opt": {"overrides": {"codegen_units": 4}}})
    assert merged == {"size_opt": {"preset": "default", "overrides": {"lto": False, "codegen_units": 4}}}


def test_missing_section_uses_default():
    assert options_from_config({}) == SizeOpts.default()


def test_preset_with_overrides():
    raw = {"size_opt": {"preset": "default_no_lto", "overrides": {"codegen_units": 4}}}
    assert options_from_config(raw) == SizeOpts(True, False, "z", 4, True)
    assert options_from_config(raw, preset="no_wee_alloc") == SizeOpts(False, True, "z", 4, True)


def test_unknown_override_rejected():
    with pytest.raises(ValueError, match="wee"):
        options_from_config({"size_opt": {"overrides": {"wee": True}}})


def test_from_files_later_wins(tmp_path: Path):
    base = tmp_path / "base.yaml"
    local = tmp_path / "local.yaml"
    empty = tmp_path / "empty.yaml"
    base.write_text("size_opt:\n  preset: only_wee_alloc\n", encoding="utf-8")
    local.write_text("size_opt:\n  overrides:\n    opt_level: s\n", encoding="utf-8")
    empty.write_text("", encoding="utf-8")

    cfg = AppConfig.from_files(base, local, empty)
    assert cfg.size_opts() == SizeOpts(True, False, "s", 16, True)

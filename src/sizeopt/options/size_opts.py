from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict

OPT_LEVELS = ("0", "1", "2", "3", "s", "z")
MAX_CODEGEN_UNITS = 65535


@dataclass(frozen=True)
class SizeOpts:
    """Size optimizations to apply to a release build.

    Only `wee_alloc` also affects development builds, since it changes the
    allocator in the entry-point source rather than the release profile.
    """

    wee_alloc: bool = True
    lto: bool = True
    opt_level: str = "z"
    codegen_units: int = 1
    enable_fluent_bundle_patch: bool = True

    def __post_init__(self) -> None:
        if self.opt_level not in OPT_LEVELS:
            raise ValueError(f"opt_level must be one of {OPT_LEVELS}, got {self.opt_level!r}")
        if isinstance(self.codegen_units, bool) or not isinstance(self.codegen_units, int):
            raise ValueError(f"codegen_units must be an integer, got {self.codegen_units!r}")
        if not 1 <= self.codegen_units <= MAX_CODEGEN_UNITS:
            raise ValueError(f"codegen_units must be in [1, {MAX_CODEGEN_UNITS}], got {self.codegen_units}")

    @classmethod
    def default(cls) -> "SizeOpts":
        return cls()

    @classmethod
    def default_2018(cls) -> "SizeOpts":
        # Without the fluent-bundle patch, for crates not on the 2021 edition.
        return cls(enable_fluent_bundle_patch=False)

    @classmethod
    def default_no_lto(cls) -> "SizeOpts":
        # lto breaks builds on some hosting providers (e.g. Netlify).
        return cls(lto=False)

    @classmethod
    def only_wee_alloc(cls) -> "SizeOpts":
        return cls(wee_alloc=True, lto=False, opt_level="3", codegen_units=16)

    @classmethod
    def no_wee_alloc(cls) -> "SizeOpts":
        return cls(wee_alloc=False)

    @classmethod
    def preset(cls, name: str) -> "SizeOpts":
        if name not in PRESETS:
            raise KeyError(f"Unknown size preset {name!r}; expected one of {sorted(PRESETS)}")
        return PRESETS[name]

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


PRESETS: Dict[str, SizeOpts] = {
    "default": SizeOpts.default(),
    "default_2018": SizeOpts.default_2018(),
    "default_no_lto": SizeOpts.default_no_lto(),
    "only_wee_alloc": SizeOpts.only_wee_alloc(),
    "no_wee_alloc": SizeOpts.no_wee_alloc(),
}

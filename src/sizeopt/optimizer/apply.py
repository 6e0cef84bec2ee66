from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tomlkit.exceptions import TOMLKitError

from sizeopt.io.writer import BuildDirWriter
from sizeopt.manifest.cargo_manifest import (
    WEE_ALLOC_VERSION,
    check_manifest_shape,
    dump_manifest,
    manifest_values,
    parse_manifest,
    set_dependency,
    set_fluent_bundle_patch,
    set_lib_crate_types,
    set_release_settings,
)
from sizeopt.optimizer.errors import (
    ManifestLoadError,
    ManifestWriteError,
    SizeOptError,
    SourceReadError,
    SourceWriteError,
)
from sizeopt.options.size_opts import SizeOpts

logger = logging.getLogger(__name__)

PLUGIN_NAME = "perseus-size-opt"
MANIFEST_PATH = Path("Cargo.toml")
LIB_PATH = Path("src") / "lib.rs"
WEE_ALLOC_DEF = """#[global_allocator]
static ALLOC: wee_alloc::WeeAlloc = wee_alloc::WeeAlloc::INIT;"""


def apply_size_opts(opts: SizeOpts, build_root: str | Path = ".") -> None:
    """Apply size optimizations to the manifest and entry point in `build_root`.

    `build_root` is the framework's internal build directory (the working
    directory by default). Each step either completes or raises a
    `SizeOptError`; earlier writes are not rolled back, so re-running with
    different options is the only way to revert.
    """
    writer = BuildDirWriter(build_root)

    try:
        doc = parse_manifest(writer.read_text(MANIFEST_PATH))
        check_manifest_shape(doc)
    except (OSError, UnicodeDecodeError, TOMLKitError, ValueError) as exc:
        raise ManifestLoadError(MANIFEST_PATH, exc) from exc
    logger.debug("Loaded manifest %s", writer.path(MANIFEST_PATH))

    set_release_settings(doc, opts.opt_level, opts.lto, opts.codegen_units)
    logger.info(
        "Release profile: opt-level=%s lto=%s codegen-units=%d", opts.opt_level, opts.lto, opts.codegen_units
    )
    # TODO: drop the fluent-bundle patch once rust-lang/rust#91011 is fixed upstream.
    if opts.enable_fluent_bundle_patch:
        set_fluent_bundle_patch(doc)
        logger.info("Patched fluent-bundle to compile at opt-level=2")
    if opts.wee_alloc:
        set_dependency(doc, "wee_alloc", WEE_ALLOC_VERSION)
        logger.info("Added wee_alloc %s dependency", WEE_ALLOC_VERSION)
    set_lib_crate_types(doc)
    logger.debug("Optimized manifest (truncated): %s", str(manifest_values(doc))[:500])

    try:
        writer.write_text(MANIFEST_PATH, dump_manifest(doc))
    except OSError as exc:
        raise ManifestWriteError(MANIFEST_PATH, exc) from exc

    if not opts.wee_alloc:
        return

    try:
        lib_contents = writer.read_text(LIB_PATH)
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceReadError(LIB_PATH, exc) from exc
    try:
        writer.write_text(LIB_PATH, f"{WEE_ALLOC_DEF}\n{lib_contents}")
    except OSError as exc:
        raise SourceWriteError(LIB_PATH, exc) from exc
    logger.info("Prepended wee_alloc global allocator to %s", writer.path(LIB_PATH))


def run_tinker(plugin_data: Any, build_root: str | Path = ".") -> None:
    """Body of the host's tinker hook.

    The host treats any failure as fatal to the build, so optimizer errors are
    re-raised as a `RuntimeError` naming the plugin.
    """
    if not isinstance(plugin_data, SizeOpts):
        raise TypeError(f"{PLUGIN_NAME} expects SizeOpts plugin data, got {type(plugin_data).__name__}")
    try:
        apply_size_opts(plugin_data, build_root)
    except SizeOptError as err:
        raise RuntimeError(f"error in `{PLUGIN_NAME}`: {err}") from err

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from sizeopt.optimizer.apply import run_tinker
from sizeopt.options.size_opts import PRESETS
from sizeopt.utils.config import AppConfig


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Apply size optimizations to a framework build directory")
    parser.add_argument("--build_dir", default=".perseus")
    parser.add_argument("--config", action="append", default=[], help="YAML config; may be repeated")
    parser.add_argument("--preset", required=False, choices=sorted(PRESETS))
    parser.add_argument("--debug", action="store_true")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s",
    )

    build_dir = Path(args.build_dir)
    if not build_dir.is_dir():
        raise SystemExit(f"Build directory {build_dir} does not exist; run the framework's build once first.")

    cfg = AppConfig.from_files(*args.config)
    opts = cfg.size_opts(args.preset)
    try:
        run_tinker(opts, build_dir)
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    print(
        f"Applied size optimizations in {build_dir} "
        f"(wee_alloc={opts.wee_alloc}, lto={opts.lto}, opt-level={opts.opt_level}, "
        f"codegen-units={opts.codegen_units}, fluent-bundle patch={opts.enable_fluent_bundle_patch})"
    )


if __name__ == "__main__":
    main()

from __future__ import annotations

import os
import tempfile
from pathlib import Path


class BuildDirWriter:
    """Whole-file text access to files under a build directory.

    Writes go to a temporary sibling file that then replaces the target, so a
    failed write never leaves a truncated file behind. Errors are plain
    `OSError`s; callers decide which typed error they become.
    """

    def __init__(self, build_root: str | Path = ".") -> None:
        self.build_root = Path(build_root)

    def path(self, relative: str | Path) -> Path:
        return self.build_root / relative

    def read_text(self, relative: str | Path) -> str:
        with open(self.path(relative), "r", encoding="utf-8", newline="") as f:
            return f.read()

    def write_text(self, relative: str | Path, text: str) -> None:
        # Resolved so a symlinked file is updated in place rather than replaced.
        target = self.path(relative).resolve()
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            if target.exists():
                os.chmod(tmp_name, target.stat().st_mode & 0o7777)
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

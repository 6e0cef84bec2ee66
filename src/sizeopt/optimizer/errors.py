from __future__ import annotations

from pathlib import Path
from typing import Optional

RETRY_HINT = "try running `perseus tinker` again (without the `--no-clean` option)"


class SizeOptError(RuntimeError):
    """Base class for failures while applying size optimizations.

    The underlying error is chained as `__cause__` and also kept on `source`.
    """

    action = "process"

    def __init__(self, path: str | Path, source: Optional[BaseException] = None) -> None:
        self.path = Path(path)
        self.source = source
        super().__init__(f"couldn't {self.action} `{self.path.as_posix()}`, {RETRY_HINT}")


class ManifestLoadError(SizeOptError):
    action = "get and parse"


class ManifestWriteError(SizeOptError):
    action = "update"


class SourceReadError(SizeOptError):
    action = "read"


class SourceWriteError(SizeOptError):
    action = "update"

"""
Preview handles for the selected input image.

A preview is a temp file holding the input bytes, so a UI can display the
image by path or file URI without touching the original resource. Handles are
released explicitly; any still alive at interpreter exit are removed then.
"""

import atexit
import contextlib
import os
import tempfile
from pathlib import Path
from types import TracebackType

from lensedit.logging_config import get_logger
from lensedit.utils.data_url import extension_for_mime

logger = get_logger(__name__)

# Preview files not yet released; cleaned on process exit
_live_paths: set[str] = set()


def _cleanup_live_paths() -> None:
    for path in list(_live_paths):
        with contextlib.suppress(OSError):
            Path(path).unlink(missing_ok=True)
    _live_paths.clear()


atexit.register(_cleanup_live_paths)


class PreviewHandle:
    """Ephemeral display reference for an input image."""

    def __init__(self, path: str) -> None:
        self._path = path
        self._released = False
        _live_paths.add(path)

    @classmethod
    def create(cls, data: bytes, media_type: str) -> "PreviewHandle":
        """Write data to a new temp file and return a handle owning it."""
        fd, path = tempfile.mkstemp(
            suffix=f".{extension_for_mime(media_type)}", prefix="lensedit_preview_"
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        logger.debug("Preview created path=%s", path)
        return cls(path)

    @property
    def path(self) -> str:
        return self._path

    @property
    def uri(self) -> str:
        return Path(self._path).as_uri()

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Delete the backing file. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        _live_paths.discard(self._path)
        with contextlib.suppress(OSError):
            Path(self._path).unlink(missing_ok=True)
        logger.debug("Preview released path=%s", self._path)

    def __enter__(self) -> "PreviewHandle":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"PreviewHandle({self._path!r}, {state})"

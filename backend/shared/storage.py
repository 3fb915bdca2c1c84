"""Atomic whole-file writes for small local data files.

Content is written to a temp file in the target's directory, fsynced, then
renamed over the target. Readers see either the previous file or the new
one, never a truncated mix. The temp file is removed on any failure.
"""

import contextlib
import os
import tempfile
from pathlib import Path


def write_atomic(target: Path, content: bytes, *, prefix: str = ".tmp_") -> None:
    """Replace ``target`` with ``content``. The parent directory must exist.

    Raises OSError on failure, leaving any previous ``target`` untouched.
    """
    fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=prefix, suffix=".tmp")
    fd_owned = True
    try:
        with os.fdopen(fd, "wb") as f:
            fd_owned = False  # os.fdopen took ownership; it will close fd
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        Path(tmp_path).replace(target)
    except BaseException:
        if fd_owned:
            with contextlib.suppress(OSError):
                os.close(fd)
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise

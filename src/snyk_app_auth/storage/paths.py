"""Cross-platform path management for snyk-app-auth.

Directory creation is deferred to helpers rather than happening at
import time, keeping imports side-effect-free.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Union

from platformdirs import user_data_dir

APP_NAME = "snyk-app-auth"

DATA_DIR: Path = Path(user_data_dir(APP_NAME))

# The install database, laid out as {"installs": [...]}
DB_FILE = DATA_DIR / "db.json"


def ensure_parents(path: Path) -> Path:
    """Create all parent directories for *path* if they do not exist.

    Returns *path* unchanged so the call can be used inline.  Unlike a
    best-effort helper, failures propagate: a missing directory means the
    following write cannot succeed either.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(
    path: Path,
    data: Union[str, bytes],
    text_mode: bool = True,
) -> None:
    """Write *data* to *path* atomically (write-to-tmp then replace).

    When *text_mode* is ``True`` (the default) the file is opened in
    text mode; pass ``False`` for binary payloads.  The temporary file is
    removed if the replace fails, and the error is re-raised.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    ensure_parents(tmp)

    mode = "w" if text_mode else "wb"
    kwargs = {"encoding": "utf-8"} if text_mode else {}
    with tmp.open(mode, **kwargs) as fh:
        if text_mode:
            fh.write(data.decode() if isinstance(data, bytes) else data)
        else:
            fh.write(data.encode() if isinstance(data, str) else data)
        fh.flush()
        os.fsync(fh.fileno())

    try:
        os.replace(tmp, path)
    except OSError:
        try:
            tmp.unlink()
        except OSError:
            pass
        raise

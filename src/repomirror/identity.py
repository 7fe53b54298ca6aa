import hashlib

from repomirror.globals import Globals
from repomirror.sync.target import SyncTarget


def derive_identity(target: SyncTarget) -> str:
    """
    Derive the directory name of the local mirror for a repository pair.

    Both URLs are hashed, joined by a NUL character that no URL can contain,
    so two pairs sharing a source still get separate directories.

    Returns:
        str: 64 hexadecimal characters, identical for equal pairs across runs.
    """
    key = f"{target.source}{Globals.IDENTITY_SEPARATOR}{target.target}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()

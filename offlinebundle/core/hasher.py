"""Hashing helpers for archive reports and bundle tree digests."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from pathlib import Path

_READ_CHUNK = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as handle:
        for chunk in iter(lambda: handle.read(_READ_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def tree_digest(root: Path, exclude: Iterable[str] = ()) -> str:
    """SHA-256 over the relative paths, modes and contents of a directory tree.

    *exclude* holds POSIX-style paths relative to *root*. Two trees with the
    same files, permission bits and bytes produce the same digest
    regardless of timestamps.
    """
    root = Path(root)
    skipped = set(exclude)
    digest = hashlib.sha256()
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        if rel in skipped:
            continue
        mode = path.lstat().st_mode & 0o777
        if path.is_symlink():
            entry = f"L {rel} {path.readlink()}\n"
            digest.update(entry.encode("utf-8"))
        elif path.is_dir():
            digest.update(f"D {rel} {mode:o}\n".encode("utf-8"))
        else:
            digest.update(f"F {rel} {mode:o} {sha256_file(path)}\n".encode("utf-8"))
    return digest.hexdigest()

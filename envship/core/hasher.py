"""Hashing helpers for artifact trees and configuration documents.

Tree digests are computed over (relative POSIX path, content digest) pairs
in sorted order, so two trees with identical files hash identically no
matter where on disk they live.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

_CHUNK_SIZE = 1024 * 1024


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes (sorted keys, compact separators)."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def file_sha256(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def tree_digest(root: Path, relative_paths: Iterable[str]) -> str:
    """SHA-256 of canonical([(path, sha256(content)), ...]) for the given files.

    Returns "sha256:<hex>".
    """
    root = Path(root)
    entries = [[rel, file_sha256(root / rel)] for rel in sorted(relative_paths)]
    return f"sha256:{sha256_hex(canonical_json_bytes(entries))}"

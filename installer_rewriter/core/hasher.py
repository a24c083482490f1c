"""Checksum helpers for published artifacts and their sidecar files."""

from __future__ import annotations

import hashlib

# Sidecar suffixes published next to every artifact, in publish order.
CHECKSUM_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512")

# Detached signature suffix. Signatures are removed on rewrite, never regenerated.
SIGNATURE_SUFFIX = "asc"


def hex_digest(algorithm: str, data: bytes) -> str:
    """Return the hex digest of *data* using a named hashlib algorithm."""
    return hashlib.new(algorithm, data).hexdigest()


def compute_checksums(data: bytes) -> dict[str, str]:
    """Compute the full checksum set for canonical artifact bytes.

    The set is always recomputed in full; callers never patch a single entry.
    """
    return {algorithm: hex_digest(algorithm, data) for algorithm in CHECKSUM_ALGORITHMS}


def checksum_sidecar_names(file_name: str) -> dict[str, str]:
    """Map each checksum algorithm to its sidecar name for *file_name*."""
    return {algorithm: f"{file_name}.{algorithm}" for algorithm in CHECKSUM_ALGORITHMS}


def stale_sidecar_names(file_name: str) -> list[str]:
    """Every sidecar invalidated when the artifact bytes change.

    Covers the checksum files, the detached signature and the signature's
    own checksum files.
    """
    signature = f"{file_name}.{SIGNATURE_SUFFIX}"
    return [
        *checksum_sidecar_names(file_name).values(),
        *checksum_sidecar_names(signature).values(),
        signature,
    ]

"""Merkle roots, paths and path verification over double-SHA-256 hashes."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import Iterable, Sequence

from galaxy_validation.bitcoin import sha256d

HASH_SIZE = 32


def _parent_level(level: list[bytes]) -> list[bytes]:
    padded = level + [level[-1]] if len(level) % 2 else level
    return [sha256d(left + right) for left, right in zip(padded[0::2], padded[1::2])]


def merkle_root(tx_hashes: Iterable[bytes]) -> bytes:
    """Return the merkle root of transaction hashes, duplicating an odd last node."""
    level = [bytes(h) for h in tx_hashes]
    if not level:
        raise ValueError("cannot compute a merkle root of no hashes")
    while len(level) > 1:
        level = _parent_level(level)
    return level[0]


def calculate_merkle_path(tx_hash: bytes, tx_hashes: Sequence[bytes]) -> list[bytes]:
    """Return sibling hashes from ``tx_hash`` up to the root; empty if absent."""
    level = [bytes(h) for h in tx_hashes]
    try:
        idx = level.index(bytes(tx_hash))
    except ValueError:
        return []
    path = []
    while len(level) > 1:
        sibling_idx = idx ^ 1
        path.append(level[sibling_idx] if sibling_idx < len(level) else level[idx])
        level = _parent_level(level)
        idx //= 2
    return path


def split_path(path_bytes: bytes) -> list[bytes]:
    """Split concatenated path bytes into 32-byte sibling hashes."""
    if len(path_bytes) % HASH_SIZE:
        raise ValueError(
            f"merkle path length {len(path_bytes)} is not a multiple of {HASH_SIZE}"
        )
    return [path_bytes[start:start + HASH_SIZE] for start in range(0, len(path_bytes), HASH_SIZE)]


def fold_merkle_path(start_hash: bytes, path: Iterable[bytes]) -> bytes:
    """Fold a path onto a hash, ordering each pair so the smaller hash comes first."""

    def step(current: bytes, sibling: bytes) -> bytes:
        if current < sibling:
            return sha256d(current + sibling)
        return sha256d(sibling + current)

    return reduce(step, (bytes(s) for s in path), bytes(start_hash))


@dataclass
class MerklePath:
    """A leaf position with its sibling hashes, lowest level first."""

    index: int
    siblings: list[bytes] = field(default_factory=list)

    def compute_root(self, txid: bytes) -> bytes:
        """Return the merkle root implied by this path for ``txid``."""
        if len(txid) != HASH_SIZE:
            raise ValueError(f"txid must be {HASH_SIZE} bytes, got {len(txid)}")
        if not 0 <= self.index < (1 << len(self.siblings)) and not (
            self.index == 0 and not self.siblings
        ):
            raise ValueError(f"index {self.index} does not fit a path of {len(self.siblings)}")
        current = bytes(txid)
        idx = self.index
        for sibling in self.siblings:
            if len(sibling) != HASH_SIZE:
                raise ValueError(f"sibling must be {HASH_SIZE} bytes, got {len(sibling)}")
            current = sha256d(current + sibling) if idx % 2 == 0 else sha256d(sibling + current)
            idx //= 2
        return current
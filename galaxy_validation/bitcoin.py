"""Bitcoin SV transaction, block header and block encoding."""

from __future__ import annotations

import hashlib
import io
import struct
from dataclasses import dataclass, field
from typing import BinaryIO

MAX_SATOSHIS = 21_000_000 * 100_000_000
COINBASE_INDEX = 0xFFFFFFFF
NULL_HASH = bytes(32)
HEADER_SIZE = 80


class DecodeError(ValueError):
    """Raised when bytes do not hold a well-formed structure."""


def sha256d(data: bytes) -> bytes:
    """Return the double SHA-256 digest of ``data``."""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise DecodeError(f"unexpected end of data: wanted {size} bytes, got {len(data)}")
    return data


def _unpack(fmt: str, stream: BinaryIO) -> int:
    return struct.unpack(fmt, _read_exact(stream, struct.calcsize(fmt)))[0]


def read_varint(stream: BinaryIO) -> int:
    """Read a Bitcoin variable-length integer from a binary stream."""
    first = _read_exact(stream, 1)[0]
    if first < 0xFD:
        return first
    fmt = {0xFD: "<H", 0xFE: "<I", 0xFF: "<Q"}[first]
    return _unpack(fmt, stream)


def write_varint(value: int) -> bytes:
    """Encode ``value`` as a Bitcoin variable-length integer."""
    if value < 0:
        raise ValueError(f"varint cannot be negative: {value}")
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + struct.pack("<H", value)
    if value <= 0xFFFFFFFF:
        return b"\xfe" + struct.pack("<I", value)
    if value <= 0xFFFFFFFFFFFFFFFF:
        return b"\xff" + struct.pack("<Q", value)
    raise ValueError(f"varint too large: {value}")


def _read_var_bytes(stream: BinaryIO) -> bytes:
    return _read_exact(stream, read_varint(stream))


def _var_bytes(data: bytes) -> bytes:
    return write_varint(len(data)) + data


def _check_hash(value: bytes, what: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{what} must be 32 bytes, got {len(value)}")
    return value


@dataclass(frozen=True)
class OutPoint:
    """Reference to an output of an earlier transaction."""

    hash: bytes = NULL_HASH
    index: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash", _check_hash(self.hash, "outpoint hash"))

    @classmethod
    def _read(cls, stream: BinaryIO) -> OutPoint:
        return cls(_read_exact(stream, 32), _unpack("<I", stream))

    def _to_bytes(self) -> bytes:
        return self.hash + struct.pack("<I", self.index)


@dataclass(frozen=True)
class TxIn:
    """Transaction input."""

    prev_output: OutPoint = field(default_factory=OutPoint)
    unlock_script: bytes = b""
    sequence: int = 0xFFFFFFFF

    @classmethod
    def _read(cls, stream: BinaryIO) -> TxIn:
        prev_output = OutPoint._read(stream)
        unlock_script = _read_var_bytes(stream)
        return cls(prev_output, unlock_script, _unpack("<I", stream))

    def _to_bytes(self) -> bytes:
        return (
            self.prev_output._to_bytes()
            + _var_bytes(bytes(self.unlock_script))
            + struct.pack("<I", self.sequence)
        )


@dataclass(frozen=True)
class TxOut:
    """Transaction output."""

    satoshis: int = 0
    lock_script: bytes = b""

    @classmethod
    def _read(cls, stream: BinaryIO) -> TxOut:
        satoshis = _unpack("<q", stream)
        return cls(satoshis, _read_var_bytes(stream))

    def _to_bytes(self) -> bytes:
        return struct.pack("<q", self.satoshis) + _var_bytes(bytes(self.lock_script))


@dataclass
class Tx:
    """A transaction."""

    version: int = 1
    inputs: list[TxIn] = field(default_factory=list)
    outputs: list[TxOut] = field(default_factory=list)
    lock_time: int = 0

    @classmethod
    def read(cls, stream: BinaryIO) -> Tx:
        """Read one transaction from a binary stream."""
        version = _unpack("<I", stream)
        inputs = [TxIn._read(stream) for _ in range(read_varint(stream))]
        outputs = [TxOut._read(stream) for _ in range(read_varint(stream))]
        return cls(version, inputs, outputs, _unpack("<I", stream))

    @classmethod
    def from_bytes(cls, data: bytes) -> Tx:
        """Read a transaction from the start of ``data``; trailing bytes are ignored."""
        return cls.read(io.BytesIO(data))

    def to_bytes(self) -> bytes:
        parts = [struct.pack("<I", self.version), write_varint(len(self.inputs))]
        parts.extend(tx_in._to_bytes() for tx_in in self.inputs)
        parts.append(write_varint(len(self.outputs)))
        parts.extend(tx_out._to_bytes() for tx_out in self.outputs)
        parts.append(struct.pack("<I", self.lock_time))
        return b"".join(parts)

    def hash(self) -> bytes:
        """Transaction hash in internal byte order."""
        return sha256d(self.to_bytes())

    @property
    def is_coinbase(self) -> bool:
        return (
            len(self.inputs) == 1
            and self.inputs[0].prev_output.hash == NULL_HASH
            and self.inputs[0].prev_output.index == COINBASE_INDEX
        )

    def is_valid(self) -> bool:
        """Check the transaction's structure and amounts."""
        if not self.inputs or not self.outputs:
            return False
        total = 0
        for tx_out in self.outputs:
            if not 0 <= tx_out.satoshis <= MAX_SATOSHIS:
                return False
            total += tx_out.satoshis
            if total > MAX_SATOSHIS:
                return False
        spent = [tx_in.prev_output for tx_in in self.inputs]
        if len(set(spent)) != len(spent):
            return False
        if self.is_coinbase:
            return 2 <= len(self.inputs[0].unlock_script) <= 100
        return all(
            not (point.hash == NULL_HASH and point.index == COINBASE_INDEX) for point in spent
        )


@dataclass(frozen=True)
class Header:
    """An 80-byte block header."""

    version: int = 1
    prev_hash: bytes = NULL_HASH
    merkle_root: bytes = NULL_HASH
    timestamp: int = 0
    bits: int = 0
    nonce: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "prev_hash", _check_hash(self.prev_hash, "prev_hash"))
        object.__setattr__(self, "merkle_root", _check_hash(self.merkle_root, "merkle_root"))

    @classmethod
    def read(cls, stream: BinaryIO) -> Header:
        """Read one header from a binary stream."""
        raw = _read_exact(stream, HEADER_SIZE)
        version, prev_hash, merkle_root, timestamp, bits, nonce = struct.unpack(
            "<I32s32sIII", raw
        )
        return cls(version, prev_hash, merkle_root, timestamp, bits, nonce)

    @classmethod
    def from_bytes(cls, data: bytes) -> Header:
        """Read a header from the start of ``data``; trailing bytes are ignored."""
        return cls.read(io.BytesIO(data))

    def to_bytes(self) -> bytes:
        return struct.pack(
            "<I32s32sIII",
            self.version,
            self.prev_hash,
            self.merkle_root,
            self.timestamp,
            self.bits,
            self.nonce,
        )

    def hash(self) -> bytes:
        """Block hash in internal byte order."""
        return sha256d(self.to_bytes())


@dataclass
class Block:
    """A block header with its transactions."""

    header: Header = field(default_factory=Header)
    txns: list[Tx] = field(default_factory=list)

    @classmethod
    def read(cls, stream: BinaryIO) -> Block:
        """Read one block from a binary stream."""
        header = Header.read(stream)
        txns = [Tx.read(stream) for _ in range(read_varint(stream))]
        return cls(header, txns)

    @classmethod
    def from_bytes(cls, data: bytes) -> Block:
        """Read a block from the start of ``data``; trailing bytes are ignored."""
        return cls.read(io.BytesIO(data))

    def to_bytes(self) -> bytes:
        return (
            self.header.to_bytes()
            + write_varint(len(self.txns))
            + b"".join(tx.to_bytes() for tx in self.txns)
        )
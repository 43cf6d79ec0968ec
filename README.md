# galaxy-validation

Building blocks for SPV (Simplified Payment Verification) work on Bitcoin SV
data: binary encoding of transactions, block headers and blocks, Merkle roots
and Merkle paths, and small in-process helpers for metrics, rate limiting and
caching.

The package uses only the standard library.

## Installation

```
pip install .
```

## Modules

### `galaxy_validation.bitcoin`

- `sha256d(data)` – double SHA-256 digest.
- `read_varint(stream)` / `write_varint(value)` – Bitcoin variable-length
  integers. `write_varint` raises `ValueError` for negative or too-large values.
- `Tx` (with `TxIn`, `TxOut` and `OutPoint`) – a transaction.
  `Tx.read(stream)`, `Tx.from_bytes(data)` and `to_bytes()` decode and encode it;
  `hash()` returns its double-SHA-256 hash in internal byte order;
  `is_valid()` checks that it has inputs and outputs, that output amounts are
  within range, that no outpoint is spent twice, and that coinbase and
  non-coinbase inputs are well formed.
- `Header` – an 80-byte block header with `read`, `from_bytes`, `to_bytes` and
  `hash()`.
- `Block` – a header with its transactions (`header`, `txns`) and the same
  `read`, `from_bytes` and `to_bytes` methods.
- `DecodeError` – raised (a subclass of `ValueError`) when the input ends
  before a structure is complete. `from_bytes` ignores trailing bytes.

### `galaxy_validation.merkle`

- `merkle_root(tx_hashes)` – the Merkle root, duplicating an odd last node at
  each level. Raises `ValueError` for an empty list.
- `calculate_merkle_path(tx_hash, tx_hashes)` – sibling hashes from the leaf up
  to the root; an empty list if `tx_hash` is not among `tx_hashes`.
- `MerklePath(index, siblings).compute_root(txid)` – the root implied by a
  path, combining each pair according to the leaf's position.
- `split_path(path_bytes)` – split concatenated path bytes into 32-byte
  hashes; raises `ValueError` if the length is not a multiple of 32.
- `fold_merkle_path(start_hash, path)` – fold sibling hashes onto a start hash,
  placing the smaller hash of each pair first.

```python
from galaxy_validation.bitcoin import Block
from galaxy_validation.merkle import MerklePath, calculate_merkle_path, merkle_root

block = Block.from_bytes(raw_block)
hashes = [tx.hash() for tx in block.txns]
root = merkle_root(hashes)
path = calculate_merkle_path(hashes[0], hashes)
assert MerklePath(index=0, siblings=path).compute_root(hashes[0]) == root
```

### `galaxy_validation.metrics`

- `Counter` – `inc(amount)` (rejects negative amounts) and `get()`.
- `Gauge` – `set(value)` and `get()`.
- `Registry` – `register(metric)` (rejects duplicate names) and `gather()`,
  which returns current values ordered by name.
- `RateLimiter(per_second)` – a token bucket; `await until_ready()` waits until
  a permit is available and takes it. The clock and sleep function can be
  supplied for testing.
- `LRUCache(capacity)` – `get(key)` returns the value or `None` and marks the
  entry as recently used; `put(key, value)` evicts the least recently used
  entry when over capacity.

## What this package does not do

It does not run a network service: there is no server, no command to start,
no request/response wire format, and no client for block, index, auth or alert
services. It also keeps no on-disk store of block headers. It provides only the
encoding, Merkle and metrics pieces described above.

## Tests

```
pip install ".[test]"
pytest
```
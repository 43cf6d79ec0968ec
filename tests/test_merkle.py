import pytest

from galaxy_validation.bitcoin import sha256d
from galaxy_validation.merkle import (
    MerklePath,
    calculate_merkle_path,
    fold_merkle_path,
    merkle_root,
    split_path,
)


def leaves(count):
    return [sha256d(bytes([n])) for n in range(count)]


def test_single_hash_is_its_own_root():
    (only,) = leaves(1)
    assert merkle_root([only]) == only
    assert calculate_merkle_path(only, [only]) == []


def test_two_leaf_root_is_hash_of_pair():
    left, right = leaves(2)
    assert merkle_root([left, right]) == sha256d(left + right)


def test_odd_leaf_is_duplicated():
    a, b, c = leaves(3)
    assert merkle_root([a, b, c]) == merkle_root([a, b, c, c])


def test_empty_root_raises():
    with pytest.raises(ValueError):
        merkle_root([])


@pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 6, 7, 8, 11])
def test_every_path_leads_to_root(count):
    hashes = leaves(count)
    root = merkle_root(hashes)
    for position, tx_hash in enumerate(hashes):
        path = calculate_merkle_path(tx_hash, hashes)
        assert MerklePath(position, path).compute_root(tx_hash) == root


@pytest.mark.parametrize("count", [2, 3, 4, 5, 9])
def test_path_length_matches_tree_depth(count):
    hashes = leaves(count)
    depth = (count - 1).bit_length()
    assert all(len(calculate_merkle_path(h, hashes)) == depth for h in hashes)


def test_missing_hash_gives_empty_path():
    hashes = leaves(4)
    assert calculate_merkle_path(sha256d(b"absent"), hashes) == []


def test_split_path_round_trip():
    siblings = leaves(3)
    assert split_path(b"".join(siblings)) == siblings


def test_split_empty_path():
    assert split_path(b"") == []


def test_split_path_rejects_partial_chunk():
    with pytest.raises(ValueError):
        split_path(bytes(33))


def test_fold_empty_path_returns_start():
    start = sha256d(b"start")
    assert fold_merkle_path(start, []) == start


def test_fold_orders_pairs():
    a, b = leaves(2)
    assert fold_merkle_path(a, [b]) == fold_merkle_path(b, [a])
    low, high = sorted([a, b])
    assert fold_merkle_path(a, [b]) == sha256d(low + high)


def test_merkle_path_rejects_bad_txid():
    with pytest.raises(ValueError):
        MerklePath(0, []).compute_root(b"short")


def test_merkle_path_rejects_index_out_of_range():
    hashes = leaves(2)
    path = calculate_merkle_path(hashes[0], hashes)
    with pytest.raises(ValueError):
        MerklePath(len(hashes), path).compute_root(hashes[0])


def test_merkle_path_rejects_bad_sibling():
    with pytest.raises(ValueError):
        MerklePath(0, [b"\x00"]).compute_root(sha256d(b"x"))
from __future__ import annotations

import json

import pytest

from merkle_drop.commitment import HashCommitment
from merkle_drop.errors import ValidationError
from merkle_drop.tree import (
    Allocation,
    Distribution,
    MerkleTree,
    build_distribution,
    load_allocations,
    parse_csv,
    parse_json,
)

from .conftest import det_address

HC = HashCommitment("keccak256")


def _allocs(n: int):
    return [Allocation.of(det_address(f"w{i}"), i + 1) for i in range(n)]


def test_layout_four_leaves():
    allocs = _allocs(4)
    tree = MerkleTree.from_allocations(allocs, HC)
    l0, l1, l2, l3 = sorted(HC.leaf(a.address, a.amount) for a in allocs)
    assert tree.leaves == [l0, l1, l2, l3]
    assert tree.root == HC.combine(HC.combine(l0, l1), HC.combine(l2, l3))


def test_odd_node_is_promoted_not_duplicated():
    allocs = _allocs(3)
    tree = MerkleTree.from_allocations(allocs, HC)
    l0, l1, l2 = tree.leaves
    assert tree.root == HC.combine(HC.combine(l0, l1), l2)
    assert tree.proof(2) == [HC.combine(l0, l1)]


def test_five_leaves_proof_for_last():
    tree = MerkleTree.from_allocations(_allocs(5), HC)
    l = tree.leaves
    upper = HC.combine(HC.combine(l[0], l[1]), HC.combine(l[2], l[3]))
    assert tree.root == HC.combine(upper, l[4])
    assert tree.proof(4) == [upper]


def test_single_leaf_tree_has_empty_proof():
    a = Allocation.of(det_address("solo"), 7)
    tree = MerkleTree.from_allocations([a], HC)
    assert tree.root == HC.leaf(a.address, a.amount)
    assert tree.proof(0) == []


@pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7, 8, 9, 16, 33])
def test_every_proof_verifies(n):
    allocs = _allocs(n)
    tree = MerkleTree.from_allocations(allocs, HC)
    for a in allocs:
        leaf = HC.leaf(a.address, a.amount)
        assert HC.verify(tree.proof_for(a.address, a.amount), tree.root, leaf)


def test_empty_and_duplicate_tables_rejected():
    with pytest.raises(ValidationError):
        MerkleTree.from_allocations([], HC)
    a = det_address("dup")
    with pytest.raises(ValidationError):
        MerkleTree.from_allocations([Allocation.of(a, 1), Allocation.of(a, 2)], HC)


def test_proof_index_out_of_range():
    tree = MerkleTree.from_allocations(_allocs(2), HC)
    with pytest.raises(ValidationError):
        tree.proof(2)
    with pytest.raises(ValidationError):
        tree.proof_for(det_address("stranger"), 1)


def test_build_distribution_and_json_round_trip():
    allocs = _allocs(6)
    dist = build_distribution(allocs, HC)
    assert dist.token_total == sum(range(1, 7))
    assert len(dist.claims) == 6

    data = json.loads(dist.to_json())
    assert data["merkleRoot"].startswith("0x")
    assert data["hash"] == "keccak256"

    again = Distribution.from_json(dist.to_json())
    assert again.merkle_root == dist.merkle_root
    assert again.claim_for(allocs[2].address).proof == dist.claim_for(allocs[2].address).proof
    with pytest.raises(ValidationError):
        again.claim_for(det_address("stranger"))


def test_malformed_distribution():
    with pytest.raises(ValidationError):
        Distribution.from_json("{not json")
    with pytest.raises(ValidationError):
        Distribution.from_json(json.dumps({"claims": {}}))


def test_parse_csv_with_header_and_comments():
    a, b = det_address("a").hex(), det_address("b").hex()
    text = f"address,amount\n# comment\n0x{a},10\n\n0x{b},0x20\n"
    allocs = parse_csv(text)
    assert [x.amount for x in allocs] == [10, 32]
    assert allocs[0].address == bytes.fromhex(a)


def test_parse_csv_header_after_leading_comment():
    a = det_address("a").hex()
    allocs = parse_csv(f"# epoch 1\naddress,amount\n0x{a},7\n")
    assert [(x.address, x.amount) for x in allocs] == [(bytes.fromhex(a), 7)]


def test_parse_csv_header_only_before_data():
    a = det_address("a").hex()
    with pytest.raises(ValidationError):
        parse_csv(f"0x{a},7\naddress,amount\n")


def test_parse_csv_bad_row():
    with pytest.raises(ValidationError):
        parse_csv("0x" + "11" * 20 + "\n")
    with pytest.raises(ValidationError):
        parse_csv("0x" + "11" * 20 + ",ten\n")


def test_parse_json_both_shapes():
    a = "0x" + det_address("a").hex()
    assert parse_json(json.dumps({a: 5}))[0].amount == 5
    assert parse_json(json.dumps([{"address": a, "amount": "6"}]))[0].amount == 6
    with pytest.raises(ValidationError):
        parse_json(json.dumps([{"addr": a}]))
    with pytest.raises(ValidationError):
        parse_json("42")


def test_load_allocations_by_suffix(tmp_path):
    a = "0x" + det_address("a").hex()
    (tmp_path / "t.csv").write_text(f"{a},3\n")
    (tmp_path / "t.json").write_text(json.dumps({a: 4}))
    assert load_allocations(tmp_path / "t.csv")[0].amount == 3
    assert load_allocations(tmp_path / "t.json")[0].amount == 4

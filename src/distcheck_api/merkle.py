from __future__ import annotations
from bisect import bisect_left
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .crypto import HD, address_bytes, keccak256, uint256_bytes

NODE_SIZE = 32


class MerkleError(ValueError):
    """Base class for malformed Merkle input."""


class EmptyInputError(MerkleError):
    pass


class MalformedNodeError(MerkleError):
    pass


class MalformedEntryError(MerkleError):
    pass


def node_from_hex(s: str) -> bytes:
    try:
        b = HD(s)
    except ValueError as e:
        raise MalformedNodeError(f"node is not valid hex: {s!r}") from e
    if len(b) != NODE_SIZE:
        raise MalformedNodeError(f"node must be {NODE_SIZE} bytes, got {len(b)}")
    return b


def encode_leaf(index: int, account: str, amount: int) -> bytes:
    """keccak256(abi.encodePacked(uint256 index, address account, uint256 amount))."""
    try:
        packed = uint256_bytes(index) + address_bytes(account) + uint256_bytes(amount)
    except ValueError as e:
        raise MalformedEntryError(str(e)) from e
    return keccak256(packed)


def entry_leaf(entry) -> bytes:
    return encode_leaf(entry.index, entry.account, entry.amount)


def combine(a: Optional[bytes], b: Optional[bytes]) -> bytes:
    """Hash two nodes in sorted order; a lone node passes through unchanged."""
    if a is None and b is None:
        raise EmptyInputError("cannot combine two absent nodes")
    if a is None:
        return b
    if b is None:
        return a
    return keccak256(a + b if a <= b else b + a)


def next_layer(nodes: Sequence[bytes]) -> List[bytes]:
    # an odd tail is carried up unpaired
    return [
        combine(nodes[i], nodes[i + 1] if i + 1 < len(nodes) else None)
        for i in range(0, len(nodes), 2)
    ]


def sorted_leaves(leaves: Iterable[bytes]) -> List[bytes]:
    """Sort leaves bytewise and drop duplicates (adjacent after sorting)."""
    out: List[bytes] = []
    for leaf in sorted(leaves):
        if not out or out[-1] != leaf:
            out.append(leaf)
    return out


def build_layers(leaves: Iterable[bytes]) -> List[List[bytes]]:
    lvl = sorted_leaves(leaves)
    if not lvl:
        raise EmptyInputError("no leaves")
    levels = [lvl]
    while len(lvl) > 1:
        lvl = next_layer(lvl)
        levels.append(lvl)
    return levels


def build_root(entries: Iterable) -> bytes:
    lvl = sorted_leaves(entry_leaf(e) for e in entries)
    if not lvl:
        raise EmptyInputError("no entries")
    while len(lvl) > 1:
        lvl = next_layer(lvl)
    return lvl[0]


def verify_leaf(leaf: bytes, proof: Iterable[bytes], root: bytes) -> bool:
    node = leaf
    for sibling in proof:
        node = combine(node, sibling)
    return node == root


def verify_proof(entry, proof: Iterable[bytes], root: bytes) -> bool:
    """Return True if folding `proof` over the entry's leaf yields `root`.

    A wrong, truncated or padded proof is not an error; it simply fails to
    reproduce the root.
    """
    return verify_leaf(entry_leaf(entry), proof, root)


@dataclass(frozen=True)
class MerkleTree:
    layers: Tuple[Tuple[bytes, ...], ...]  # layer 0 = sorted, deduplicated leaves

    @classmethod
    def from_leaves(cls, leaves: Iterable[bytes]) -> "MerkleTree":
        return cls(tuple(tuple(lvl) for lvl in build_layers(leaves)))

    @classmethod
    def from_entries(cls, entries: Iterable) -> "MerkleTree":
        return cls.from_leaves(entry_leaf(e) for e in entries)

    @property
    def leaves(self) -> Tuple[bytes, ...]:
        return self.layers[0]

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    def proof_for(self, leaf: bytes) -> List[bytes]:
        """Sibling hashes from `leaf` up to the root.

        Levels where the node is the carried odd tail contribute nothing.
        """
        idx = bisect_left(self.leaves, leaf)
        if idx == len(self.leaves) or self.leaves[idx] != leaf:
            raise KeyError(leaf.hex())
        proof = []
        for level in self.layers[:-1]:
            sibling_idx = idx ^ 1
            if sibling_idx < len(level):
                proof.append(level[sibling_idx])
            idx //= 2
        return proof

    def proof_for_entry(self, entry) -> List[bytes]:
        return self.proof_for(entry_leaf(entry))

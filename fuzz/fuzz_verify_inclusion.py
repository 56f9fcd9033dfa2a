"""Inclusion proof fuzzing with mutated proofs, amounts and roots."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from distcheck_api.merkle import MerkleTree, verify_proof
    from distcheck_api.models import Entry


def _account(body: bytes, i: int) -> str:
    chunk = (body[i:] + body)[:20]
    return "0x" + chunk.hex().rjust(40, "0")


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], "little")
    random.seed(seed)
    count = 3 + (data[4] % 30)
    body = data[5:]
    entries = [
        Entry(
            index=i,
            account=_account(body, i),
            amount=int.from_bytes(body[i:i + 8] or b"\x01", "big"),
        )
        for i in range(count)
    ]
    tree = MerkleTree.from_entries(entries)
    idx = seed % len(entries)
    target = entries[idx]
    proof = tree.proof_for_entry(target)
    choice = random.random()
    if choice < 0.2 and proof:
        k = random.randrange(len(proof))
        sib = proof[k]
        pos = random.randrange(len(sib))
        proof[k] = sib[:pos] + bytes([sib[pos] ^ 0x01]) + sib[pos + 1:]
        if verify_proof(target, proof, tree.root):
            raise RuntimeError("tampered proof unexpectedly verified")
    elif choice < 0.3:
        bumped = Entry(index=target.index, account=target.account, amount=target.amount + 1)
        if verify_proof(bumped, proof, tree.root):
            raise RuntimeError("tampered amount unexpectedly verified")
    elif not verify_proof(target, proof, tree.root):
        raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()

"""Fuzz harness for tree construction & proof verification over random entries."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from distcheck_api.merkle import MerkleTree, build_root, verify_proof
    from distcheck_api.models import Entry


def _entries(fdp: "atheris.FuzzedDataProvider"):
    # Bounded count; small index/account space so duplicates actually occur
    count = fdp.ConsumeIntInRange(1, 40)
    out = []
    for _ in range(count):
        out.append(
            Entry(
                index=fdp.ConsumeIntInRange(0, 8),
                account="0x" + fdp.ConsumeBytes(1).hex().rjust(40, "0"),
                amount=fdp.ConsumeIntInRange(0, 2**256 - 1),
            )
        )
    return out


def TestOneInput(data: bytes):  # noqa: N802
    fdp = atheris.FuzzedDataProvider(data)
    entries = _entries(fdp)
    tree = MerkleTree.from_entries(entries)
    if build_root(list(reversed(entries))) != tree.root:
        raise RuntimeError("root depends on entry order")
    for e in entries:
        if not verify_proof(e, tree.proof_for_entry(e), tree.root):
            raise RuntimeError("valid inclusion proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()

from typing import Dict, Any
from distcheck_api.merkle import node_from_hex, verify_proof
from distcheck_api.models import DistributorInfo, Entry
from distcheck_api.report import verify_distribution


def verify_claim(claim_json: Dict[str, Any], root_hex: str) -> bool:
    """Return True if a single claim's proof reproduces `root_hex`.

    Expects `index`, `account`, `amount` and `proof` (list of 0x-hex nodes).
    Any malformed field makes the claim invalid rather than raising.
    """
    try:
        entry = Entry(
            index=claim_json["index"],
            account=claim_json["account"],
            amount=claim_json["amount"],
        )
        proof = [node_from_hex(p) for p in claim_json.get("proof", [])]
        root = node_from_hex(root_hex)
    except (KeyError, TypeError, AttributeError, ValueError):
        return False
    return verify_proof(entry, proof, root)


def verify_distribution_json(info_json: Dict[str, Any]) -> bool:
    """Return True if every proof verifies and the rebuilt root matches.

    An unpublished slot (empty merkleRoot, no recipients) is trivially valid.
    """
    try:
        info = DistributorInfo.model_validate(info_json)
        if info.is_empty and not info.recipients:
            return True
        dist = info.to_distribution()
    except ValueError:
        return False
    return verify_distribution(dist).valid

from __future__ import annotations
import logging
from typing import List, Optional

from .crypto import H
from .merkle import build_root, verify_proof
from .models import Distribution, DistributionReport, EntryResult

log = logging.getLogger(__name__)


def vacuous_report(published_root: Optional[str] = None) -> DistributionReport:
    """Report for a distribution with no recipients: nothing to disprove."""
    return DistributionReport(
        recipient_count=0,
        published_root=published_root,
        proofs_valid=True,
        root_matches=True,
    )


def verify_distribution(dist: Distribution) -> DistributionReport:
    """Check every recipient's proof and independently rebuild the root.

    All entries are checked even after a failure. Proof failures and a root
    mismatch are reported separately.
    """
    published = H(dist.root)
    if not dist.entries:
        log.info("distribution has no recipients; nothing to verify")
        return vacuous_report(published)

    results: List[EntryResult] = []
    failed: List[str] = []
    for entry in dist.entries:
        # an account without a proof is checked against the empty path
        ok = verify_proof(entry, dist.proofs.get(entry.account, ()), dist.root)
        if not ok:
            log.debug("verification for %s failed", entry.account)
            failed.append(entry.account)
        results.append(EntryResult(account=entry.account, index=entry.index, verified=ok))

    rebuilt = build_root(dist.entries)
    root_matches = rebuilt == dist.root
    log.info(
        "checked %d recipients: %d proof failures, rebuilt root %s (%s)",
        len(dist.entries),
        len(failed),
        H(rebuilt),
        "match" if root_matches else "MISMATCH",
    )
    return DistributionReport(
        recipient_count=len(dist.entries),
        published_root=published,
        rebuilt_root=H(rebuilt),
        proofs_valid=not failed,
        root_matches=root_matches,
        failed_accounts=failed,
        results=results,
    )

import os
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Keep CLI/API log output quiet unless a test asks for it
os.environ.setdefault("DISTCHECK_LOG_LEVEL", "WARNING")


@pytest.fixture
def data_dir(tmp_path):
    """A distribution file at <tmp>/optimism/op.json with three slots:
    a valid distribution, an unpublished one and one with a tampered amount.
    """
    from tests._helpers import distributor_json, make_entries, write_distributions

    good = distributor_json(make_entries(5), description="Season 1")
    bad = distributor_json(make_entries(4), description="Season 3")
    first = next(iter(bad["recipients"]))
    bad["recipients"][first]["amount"] = hex(10**30)
    write_distributions(
        tmp_path / "optimism" / "op.json",
        [good, {"description": "Season 2", "merkleRoot": "", "tokenTotal": "0x0", "recipients": {}}, bad],
    )
    return tmp_path

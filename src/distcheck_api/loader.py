from __future__ import annotations
import json
from pathlib import Path
from typing import List, Optional, Union

from .models import DistributorInfo


def distribution_path(data_dir: Union[str, Path], network: str, token: str) -> Path:
    """<data_dir>/<network>/<token>.json"""
    return Path(data_dir) / network / f"{token}.json"


def load_distributions(path: Union[str, Path]) -> List[DistributorInfo]:
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"{path}: expected a JSON array of distributions")
    return [DistributorInfo.model_validate(item) for item in raw]


def select_distribution(
    infos: List[DistributorInfo], contract_id: int
) -> Optional[DistributorInfo]:
    """Contract ids are 1-based; anything outside the file yields None."""
    if contract_id < 1 or contract_id > len(infos):
        return None
    return infos[contract_id - 1]

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field
from pydantic import field_validator

from .crypto import normalize_address, parse_uint
from .merkle import MalformedEntryError, node_from_hex


class Entry(BaseModel):
    """One distribution recipient.

    `account` is normalised to lowercase 0x-hex so that two spellings of the
    same address compare (and hash into sets) as equal. `index` and `amount`
    accept ints, decimal strings or 0x-hex strings and must fit in uint256.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    account: str
    amount: int

    @field_validator("index", "amount", mode="before")
    @classmethod
    def _uint256(cls, v):
        return parse_uint(v)

    @field_validator("account", mode="before")
    @classmethod
    def _address(cls, v):
        return normalize_address(v)


class Recipient(BaseModel):
    index: int
    amount: int
    proof: List[str] = Field(default_factory=list)

    @field_validator("index", "amount", mode="before")
    @classmethod
    def _uint256(cls, v):
        return parse_uint(v)


@dataclass(frozen=True)
class Distribution:
    root: bytes
    entries: Tuple[Entry, ...]
    proofs: Mapping[str, List[bytes]]  # normalised account -> sibling path


class DistributorInfo(BaseModel):
    """One published distribution as written by the distributor tooling."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = ""
    merkle_root: str = Field(default="", alias="merkleRoot")
    token_total: int = Field(default=0, alias="tokenTotal")
    recipients: Dict[str, Recipient] = Field(default_factory=dict)

    @field_validator("token_total", mode="before")
    @classmethod
    def _total(cls, v):
        return parse_uint(v)

    @property
    def is_empty(self) -> bool:
        # contract slot reserved but never published
        return self.merkle_root == ""

    def to_distribution(self) -> Distribution:
        """Decode hex nodes and build the in-memory Distribution.

        Raises MalformedNodeError for a bad root/proof node and
        MalformedEntryError for a bad or repeated recipient account.
        """
        root = node_from_hex(self.merkle_root)
        entries: List[Entry] = []
        proofs: Dict[str, List[bytes]] = {}
        for account, recipient in self.recipients.items():
            try:
                entry = Entry(
                    index=recipient.index, account=account, amount=recipient.amount
                )
            except ValidationError as e:
                raise MalformedEntryError(f"invalid recipient {account!r}") from e
            if entry.account in proofs:
                raise MalformedEntryError(f"duplicate recipient {entry.account}")
            proofs[entry.account] = [node_from_hex(p) for p in recipient.proof]
            entries.append(entry)
        return Distribution(root=root, entries=tuple(entries), proofs=proofs)


class EntryResult(BaseModel):
    account: str
    index: int
    verified: bool


class DistributionReport(BaseModel):
    recipient_count: int
    published_root: Optional[str] = None
    rebuilt_root: Optional[str] = None
    proofs_valid: bool
    root_matches: bool
    failed_accounts: List[str] = Field(default_factory=list)
    results: List[EntryResult] = Field(default_factory=list)

    @computed_field  # type: ignore[misc]
    @property
    def valid(self) -> bool:
        return self.proofs_valid and self.root_matches


class RootRequest(BaseModel):
    entries: List[Entry] = Field(default_factory=list)

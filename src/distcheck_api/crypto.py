from __future__ import annotations
from typing import Union

from eth_utils import decode_hex, encode_hex, is_hex, is_hex_address, keccak

UINT256_MAX = 2**256 - 1


def H(b: bytes) -> str:
    """Hex-encode bytes with a 0x prefix."""
    return encode_hex(b)


def HD(s: str) -> bytes:
    """Decode a hex string (0x prefix optional) with strict validation."""
    if not isinstance(s, str) or not is_hex(s):
        raise ValueError("invalid hex")
    try:
        return decode_hex(s)
    except Exception as e:
        raise ValueError("invalid hex") from e


def keccak256(data: bytes) -> bytes:
    return keccak(data)


def uint256_bytes(value: int) -> bytes:
    """32-byte big-endian encoding of an unsigned 256-bit integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"uint256 must be an integer, got {type(value).__name__}")
    if value < 0 or value > UINT256_MAX:
        raise ValueError("uint256 out of range")
    return value.to_bytes(32, "big")


def address_bytes(account: str) -> bytes:
    """Raw 20 bytes of a hex address. Case (and checksum) is ignored."""
    if not isinstance(account, str) or not is_hex_address(account):
        raise ValueError(f"invalid address: {account!r}")
    return decode_hex(account)


def normalize_address(account: str) -> str:
    return H(address_bytes(account))


def parse_uint(value: Union[int, str]) -> int:
    """Parse an int, a decimal string or a 0x-prefixed hex string.

    Floats are rejected: amounts routinely exceed 2**53 and must stay exact.
    """
    if isinstance(value, bool):
        raise ValueError("expected an unsigned integer, got a bool")
    if isinstance(value, int):
        n = value
    elif isinstance(value, str):
        s = value.strip()
        if s[:2].lower() == "0x":
            if len(s) == 2 or not is_hex(s):
                raise ValueError(f"invalid hex integer: {value!r}")
            n = int(s[2:], 16)
        elif s.isascii() and s.isdigit():
            n = int(s, 10)
        else:
            raise ValueError(f"invalid integer string: {value!r}")
    else:
        raise ValueError(f"expected an unsigned integer, got {type(value).__name__}")
    if n < 0 or n > UINT256_MAX:
        raise ValueError("value outside the uint256 range")
    return n

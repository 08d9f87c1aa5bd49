"""Collaborator protocols and account helpers."""
from __future__ import annotations

import hashlib
from typing import Any, Protocol

ZERO_ADDRESS = "0x" + "0" * 40


def make_address(label: str) -> str:
    """Deterministic pseudo-address for a named account or contract."""
    return "0x" + hashlib.sha256(label.encode()).hexdigest()[:40]


def is_zero_address(address: Any) -> bool:
    return address is None or address == "" or address == ZERO_ADDRESS


class PriceOracleAdapter(Protocol):
    """Current USD price of one collateral asset."""

    address: str

    def latest_price(self) -> tuple[int, int]: ...

    def decimals(self) -> int: ...


class AssetTransferAdapter(Protocol):
    """Balance-moving collaborator; a False return is the failure signal.

    ``snapshot``/``restore`` let the engine discard a transfer when the
    operation that made it is rejected later on.
    """

    address: str

    def decimals(self) -> int: ...

    def balance_of(self, account: str) -> int: ...

    def transfer(self, sender: str, recipient: str, amount: int) -> bool: ...

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool: ...

    def snapshot(self) -> Any: ...

    def restore(self, state: Any) -> None: ...

"""Project-native typed exceptions for on-chain read failures."""

from __future__ import annotations


class ChainReadError(Exception):
    """Base exception for failed contract reads.

    Attributes:
        contract_address: Optional address of the contract being read.
    """

    def __init__(self, message: str, contract_address: str | None = None):
        super().__init__(message)
        self.contract_address = contract_address


class ChainConnectionError(ChainReadError, ConnectionError):
    """Transport-level failure while talking to the RPC endpoint."""


class ChainCallRevertedError(ChainReadError, RuntimeError):
    """Contract call reverted or returned undecodable output."""

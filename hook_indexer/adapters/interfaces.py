"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from hook_indexer.domain import Pool, ReserveBalances


@dataclass(frozen=True)
class TokenMetadata:
    """ERC-20 metadata read from the token contract.

    Attributes:
        symbol: Token symbol, empty when the probe failed.
        name: Token name, empty when the probe failed.
        decimals: Token decimals, zero when the probe failed.
    """

    symbol: str
    name: str
    decimals: int


@dataclass(frozen=True)
class WrappedTokenAddresses:
    """Yield-wrapped token addresses exposed by a hook.

    Attributes:
        a_token0: Wrapped token for token0, or None when unavailable.
        a_token1: Wrapped token for token1, or None when unavailable.
    """

    a_token0: str | None
    a_token1: str | None


class BalanceReaderPort(Protocol):
    """Port definition for reading a pool's custodial reserves."""

    def adapter_read_reserves(self, pool: Pool, block_number: int) -> ReserveBalances:
        """Read idle plus wrapped token holdings at the pool's hook address.

        Args:
            pool: Pool whose hook holds the reserves.
            block_number: Block at which balances are read.

        Returns:
            ReserveBalances: Observed reserves; a reverted wrapped-token probe contributes zero.

        Raises:
            ChainReadError: Raised when the idle balance cannot be read.
        """


class PriceOraclePort(Protocol):
    """Port definition for USD token quotes."""

    def adapter_quote_token_usd(self, token_address: str, token_decimals: int, block_number: int | None) -> Decimal:
        """Quote one whole token in the configured quote asset.

        Args:
            token_address: Token to price.
            token_decimals: Token decimals used to size the one-token quote.
            block_number: Optional block for the quote; latest when None.

        Returns:
            Decimal: USD price, exactly one for the quote token, zero when no path quotes.

        Raises:
            RuntimeError: This port does not raise for quote failures.
        """


class TokenMetadataPort(Protocol):
    """Port definition for ERC-20 metadata reads."""

    def adapter_read_token_metadata(self, token_address: str) -> TokenMetadata:
        """Read symbol, name and decimals for one token.

        Args:
            token_address: Token contract address.

        Returns:
            TokenMetadata: Metadata with empty/zero defaults for failed probes.

        Raises:
            RuntimeError: This port does not raise for probe failures.
        """


class HookContractPort(Protocol):
    """Port definition for reads against the lending hook contract."""

    def adapter_read_wrapped_tokens(self, hook_address: str, block_number: int) -> WrappedTokenAddresses:
        """Read the hook's yield-wrapped token addresses.

        Raises:
            ChainReadError: Raised when the hook cannot be read.
        """

    def adapter_token_amounts_for_liquidity(self, hook_address: str, liquidity: int, block_number: int) -> tuple[int, int]:
        """Convert liquidity units into signed token amounts using the hook's position math.

        Raises:
            ChainReadError: Raised when the hook cannot be read.
        """

"""web3-backed implementations of the chain read ports."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Final, Sequence

from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, Web3Exception

from hook_indexer.domain import ZERO_ADDRESS, Pool, ReserveBalances, domain_normalize_address

from .chain_abi import ERC20_ABI, LENDING_HOOK_ABI, V3_QUOTER_ABI, V4_QUOTER_ABI
from .chain_errors import ChainCallRevertedError, ChainConnectionError, ChainReadError
from .interfaces import (
    BalanceReaderPort,
    HookContractPort,
    PriceOraclePort,
    TokenMetadata,
    TokenMetadataPort,
    WrappedTokenAddresses,
)

logger = logging.getLogger(__name__)

DEFAULT_QUOTE_FEE_TIERS: Final[tuple[int, ...]] = (100, 500, 3000, 10000)
DEFAULT_QUOTE_TICK_SPACINGS: Final[tuple[int, ...]] = (1, 10, 60, 200)


def adapter_create_web3(rpc_url: str, request_timeout_seconds: float = 30.0) -> Web3:
    """Create an HTTP-provider web3 client.

    Args:
        rpc_url: JSON-RPC endpoint URL.
        request_timeout_seconds: Per-request timeout.

    Returns:
        Web3: Configured client.

    Raises:
        ValueError: Raised when the URL is blank or the timeout is not positive.
    """

    if not rpc_url.strip():
        raise ValueError("rpc_url must not be blank")
    if request_timeout_seconds <= 0:
        raise ValueError("request_timeout_seconds must be > 0")
    return Web3(Web3.HTTPProvider(rpc_url.strip(), request_kwargs={"timeout": request_timeout_seconds}))


class Web3ContractCaller:
    """Thin call helper translating web3 failures into `ChainReadError` subclasses."""

    def __init__(self, web3: Web3):
        """Initialize contract caller.

        Args:
            web3: Connected web3 client.

        Raises:
            ValueError: Raised when web3 is None.
        """

        if web3 is None:
            raise ValueError("web3 must not be None")
        self._web3 = web3

    def chain_call(
        self,
        contract_address: str,
        abi: list[dict[str, Any]],
        function_name: str,
        arguments: Sequence[Any] = (),
        block_number: int | None = None,
    ) -> Any:
        """Call one view function and return its decoded output.

        Raises:
            ChainCallRevertedError: Raised when the call reverts or output cannot be decoded.
            ChainConnectionError: Raised on transport or RPC failures.
        """

        block_identifier = "latest" if block_number is None else block_number
        contract = self._web3.eth.contract(address=Web3.to_checksum_address(contract_address), abi=abi)
        try:
            return getattr(contract.functions, function_name)(*arguments).call(block_identifier=block_identifier)
        except (ContractLogicError, BadFunctionCallOutput) as error:
            raise ChainCallRevertedError(f"{function_name} reverted", contract_address=contract_address) from error
        except (Web3Exception, OSError) as error:
            raise ChainConnectionError(f"{function_name} call failed", contract_address=contract_address) from error

    def chain_native_balance(self, account_address: str, block_number: int | None = None) -> int:
        """Read the native-currency balance of one account.

        Raises:
            ChainConnectionError: Raised on transport or RPC failures.
        """

        block_identifier = "latest" if block_number is None else block_number
        try:
            return int(self._web3.eth.get_balance(Web3.to_checksum_address(account_address), block_identifier))
        except (Web3Exception, OSError) as error:
            raise ChainConnectionError("native balance read failed", contract_address=account_address) from error


class Web3BalanceReader(BalanceReaderPort):
    """Read idle and wrapped reserves held by a lending hook."""

    def __init__(self, caller: Web3ContractCaller):
        if caller is None:
            raise ValueError("caller must not be None")
        self._caller = caller

    def adapter_read_reserves(self, pool: Pool, block_number: int) -> ReserveBalances:
        """Read idle plus wrapped holdings for both pool tokens.

        Args:
            pool: Pool whose hook holds the reserves.
            block_number: Block at which balances are read.

        Returns:
            ReserveBalances: Observed reserves in raw token units.

        Raises:
            ChainReadError: Raised when an idle balance cannot be read.
        """

        reserve0 = self._read_idle_balance(pool.token0, pool.hook, block_number) + self._read_wrapped_balance(
            pool.a_token0, pool.hook, block_number
        )
        reserve1 = self._read_idle_balance(pool.token1, pool.hook, block_number) + self._read_wrapped_balance(
            pool.a_token1, pool.hook, block_number
        )
        return ReserveBalances(reserve0=reserve0, reserve1=reserve1)

    def _read_idle_balance(self, token_address: str, holder_address: str, block_number: int) -> int:
        if domain_normalize_address(token_address) == ZERO_ADDRESS:
            return self._caller.chain_native_balance(holder_address, block_number)
        return int(
            self._caller.chain_call(token_address, ERC20_ABI, "balanceOf", (Web3.to_checksum_address(holder_address),), block_number)
        )

    def _read_wrapped_balance(self, wrapped_token_address: str | None, holder_address: str, block_number: int) -> int:
        if wrapped_token_address is None or domain_normalize_address(wrapped_token_address) == ZERO_ADDRESS:
            return 0
        try:
            return int(
                self._caller.chain_call(
                    wrapped_token_address,
                    ERC20_ABI,
                    "balanceOf",
                    (Web3.to_checksum_address(holder_address),),
                    block_number,
                )
            )
        except ChainCallRevertedError:
            logger.warning("wrapped balance probe reverted token=%s holder=%s", wrapped_token_address, holder_address)
            return 0


class Web3TokenMetadataReader(TokenMetadataPort):
    """Probe ERC-20 metadata, defaulting each failed field independently."""

    _NATIVE_METADATA: Final[TokenMetadata] = TokenMetadata(symbol="ETH", name="Ether", decimals=18)

    def __init__(self, caller: Web3ContractCaller):
        if caller is None:
            raise ValueError("caller must not be None")
        self._caller = caller

    def adapter_read_token_metadata(self, token_address: str) -> TokenMetadata:
        """Read symbol, name and decimals for one token.

        Args:
            token_address: Token contract address; the zero address denotes the native currency.

        Returns:
            TokenMetadata: Metadata with empty/zero defaults for failed probes.

        Raises:
            RuntimeError: This implementation does not raise for probe failures.
        """

        if domain_normalize_address(token_address) == ZERO_ADDRESS:
            return self._NATIVE_METADATA

        symbol = self._probe(token_address, "symbol", "")
        name = self._probe(token_address, "name", "")
        decimals = self._probe(token_address, "decimals", 0)
        return TokenMetadata(symbol=str(symbol), name=str(name), decimals=int(decimals))

    def _probe(self, token_address: str, function_name: str, default: Any) -> Any:
        try:
            return self._caller.chain_call(token_address, ERC20_ABI, function_name)
        except ChainReadError:
            logger.warning("token metadata probe failed token=%s field=%s", token_address, function_name)
            return default


class Web3HookContractReader(HookContractPort):
    """Read wrapped-token configuration and position math from the lending hook."""

    def __init__(self, caller: Web3ContractCaller):
        if caller is None:
            raise ValueError("caller must not be None")
        self._caller = caller

    def adapter_read_wrapped_tokens(self, hook_address: str, block_number: int) -> WrappedTokenAddresses:
        """Read aToken0/aToken1; a reverted probe yields None for that side.

        Raises:
            ChainConnectionError: Raised on transport or RPC failures.
        """

        return WrappedTokenAddresses(
            a_token0=self._probe_address(hook_address, "aToken0", block_number),
            a_token1=self._probe_address(hook_address, "aToken1", block_number),
        )

    def adapter_token_amounts_for_liquidity(self, hook_address: str, liquidity: int, block_number: int) -> tuple[int, int]:
        """Convert liquidity units into signed token amounts.

        Raises:
            ChainReadError: Raised when the hook call fails.
        """

        amount0, amount1 = self._caller.chain_call(
            hook_address,
            LENDING_HOOK_ABI,
            "getTokenAmountsForLiquidity",
            (liquidity,),
            block_number,
        )
        return int(amount0), int(amount1)

    def _probe_address(self, hook_address: str, function_name: str, block_number: int) -> str | None:
        try:
            address = self._caller.chain_call(hook_address, LENDING_HOOK_ABI, function_name, (), block_number)
        except ChainCallRevertedError:
            logger.warning("hook probe reverted hook=%s field=%s", hook_address, function_name)
            return None
        return domain_normalize_address(str(address))


class Web3PriceOracle(PriceOraclePort):
    """Quote token prices against the quote asset, trying primary then fallback quoters.

    The quote token's decimals are cached after the first successful read only.
    """

    def __init__(
        self,
        caller: Web3ContractCaller,
        quote_token_address: str,
        primary_quoter_address: str,
        fallback_quoter_address: str | None = None,
        fee_tiers: Sequence[int] = DEFAULT_QUOTE_FEE_TIERS,
        tick_spacings: Sequence[int] = DEFAULT_QUOTE_TICK_SPACINGS,
    ):
        """Initialize price oracle.

        Args:
            caller: Contract call helper.
            quote_token_address: Quote asset priced at exactly one.
            primary_quoter_address: Single-pool quoter tried first, across fee tiers.
            fallback_quoter_address: Pool-key quoter tried across fee tiers and tick spacings.
            fee_tiers: Ordered fee tiers in hundredths of a bip.
            tick_spacings: Ordered tick spacings for the fallback path.

        Raises:
            ValueError: Raised when dependencies or addresses are invalid.
        """

        if caller is None:
            raise ValueError("caller must not be None")
        if not fee_tiers:
            raise ValueError("fee_tiers must not be empty")

        self._caller = caller
        self._quote_token_address = domain_normalize_address(quote_token_address)
        self._primary_quoter_address = domain_normalize_address(primary_quoter_address)
        self._fallback_quoter_address = (
            None if fallback_quoter_address is None else domain_normalize_address(fallback_quoter_address)
        )
        self._fee_tiers = tuple(fee_tiers)
        self._tick_spacings = tuple(tick_spacings)
        self._quote_token_decimals: int | None = None

    def adapter_quote_token_usd(self, token_address: str, token_decimals: int, block_number: int | None) -> Decimal:
        """Quote one whole token in the quote asset.

        Args:
            token_address: Token to price.
            token_decimals: Token decimals used to size the one-token quote.
            block_number: Optional block for the quote; latest when None.

        Returns:
            Decimal: USD price, one for the quote token, zero when nothing quotes
            or the quote token decimals cannot be read.

        Raises:
            RuntimeError: This implementation does not raise for quote failures.
        """

        normalized_token_address = domain_normalize_address(token_address)
        if normalized_token_address == self._quote_token_address:
            return Decimal("1")

        amount_in = 10**token_decimals
        amount_out = self._quote_primary(normalized_token_address, amount_in, block_number)
        if amount_out is None:
            amount_out = self._quote_fallback(normalized_token_address, amount_in, block_number)
        if amount_out is None:
            logger.warning("no quote path for token=%s", normalized_token_address)
            return Decimal("0")

        quote_token_decimals = self._resolve_quote_token_decimals(block_number)
        if quote_token_decimals is None:
            return Decimal("0")
        return Decimal(amount_out) / (Decimal(10) ** quote_token_decimals)

    def _quote_primary(self, token_address: str, amount_in: int, block_number: int | None) -> int | None:
        for fee in self._fee_tiers:
            params = (
                Web3.to_checksum_address(token_address),
                Web3.to_checksum_address(self._quote_token_address),
                amount_in,
                fee,
                0,
            )
            try:
                result = self._caller.chain_call(
                    self._primary_quoter_address,
                    V3_QUOTER_ABI,
                    "quoteExactInputSingle",
                    (params,),
                    block_number,
                )
            except ChainReadError:
                continue
            amount_out = int(result[0])
            if amount_out > 0:
                return amount_out
        return None

    def _quote_fallback(self, token_address: str, amount_in: int, block_number: int | None) -> int | None:
        if self._fallback_quoter_address is None:
            return None

        zero_for_one = int(token_address, 16) < int(self._quote_token_address, 16)
        currency0, currency1 = (
            (token_address, self._quote_token_address) if zero_for_one else (self._quote_token_address, token_address)
        )
        for fee in self._fee_tiers:
            for tick_spacing in self._tick_spacings:
                pool_key = (
                    Web3.to_checksum_address(currency0),
                    Web3.to_checksum_address(currency1),
                    fee,
                    tick_spacing,
                    Web3.to_checksum_address(ZERO_ADDRESS),
                )
                try:
                    result = self._caller.chain_call(
                        self._fallback_quoter_address,
                        V4_QUOTER_ABI,
                        "quoteExactInputSingle",
                        ((pool_key, zero_for_one, amount_in, b""),),
                        block_number,
                    )
                except ChainReadError:
                    continue
                amount_out = int(result[0])
                if amount_out > 0:
                    return amount_out
        return None

    def _resolve_quote_token_decimals(self, block_number: int | None) -> int | None:
        if self._quote_token_decimals is not None:
            return self._quote_token_decimals

        try:
            decimals = int(self._caller.chain_call(self._quote_token_address, ERC20_ABI, "decimals", (), block_number))
        except ChainReadError:
            logger.warning("quote token decimals read failed token=%s", self._quote_token_address)
            return None
        self._quote_token_decimals = decimals
        return decimals

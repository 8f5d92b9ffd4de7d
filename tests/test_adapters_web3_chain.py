"""Tests for web3-backed balance, metadata, hook and price readers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable

import pytest
from web3.exceptions import ContractLogicError

from hook_indexer.adapters import (
    ChainCallRevertedError,
    ChainConnectionError,
    TokenMetadata,
    Web3BalanceReader,
    Web3ContractCaller,
    Web3HookContractReader,
    Web3PriceOracle,
    Web3TokenMetadataReader,
)
from hook_indexer.domain import ZERO_ADDRESS, Pool

HOOK_ADDRESS = "0x" + "11" * 20
TOKEN0_ADDRESS = "0x" + "aa" * 20
TOKEN1_ADDRESS = "0x" + "bb" * 20
A_TOKEN0_ADDRESS = "0x" + "a0" * 20
QUOTE_TOKEN_ADDRESS = "0x" + "cc" * 20
PRIMARY_QUOTER_ADDRESS = "0x" + "01" * 20
FALLBACK_QUOTER_ADDRESS = "0x" + "02" * 20


class _CallerStub:
    """Contract caller stub answering calls through a resolver function."""

    def __init__(self, resolver: Callable[[str, str, tuple], Any], native_balance: int = 0) -> None:
        self._resolver = resolver
        self._native_balance = native_balance
        self.calls: list[tuple[str, str, tuple, int | None]] = []

    def chain_call(self, contract_address, abi, function_name, arguments=(), block_number=None):
        """Record the call and return the resolver result.

        Returns:
            Any: Resolver output for the call.

        Raises:
            ChainReadError: Raised when the resolver raises it.
        """

        _ = abi
        self.calls.append((contract_address.lower(), function_name, tuple(arguments), block_number))
        return self._resolver(contract_address.lower(), function_name, tuple(arguments))

    def chain_native_balance(self, account_address, block_number=None):
        """Return the configured native balance."""

        self.calls.append((account_address.lower(), "native_balance", (), block_number))
        return self._native_balance


def _build_pool(token0: str = TOKEN0_ADDRESS, a_token0: str | None = A_TOKEN0_ADDRESS, a_token1: str | None = None) -> Pool:
    return Pool(
        pool_id="0x" + "cd" * 32,
        hook=HOOK_ADDRESS,
        token0=token0,
        token1=TOKEN1_ADDRESS,
        fee=3000,
        tick_spacing=60,
        current_price=Decimal("1"),
        created_at_timestamp=0,
        created_at_block_number=0,
        updated_at_timestamp=0,
        updated_at_block_number=0,
        a_token0=a_token0,
        a_token1=a_token1,
    )


def _reverted(function_name: str) -> ChainCallRevertedError:
    return ChainCallRevertedError(f"{function_name} reverted")


def test_balance_reader_sums_idle_and_wrapped_balances() -> None:
    """Add the wrapped-token balance to the idle balance for each token.

    Returns:
        None: Assertions validate reserve totals and read block.

    Raises:
        AssertionError: Raised when reserves are summed incorrectly.
    """

    balances = {TOKEN0_ADDRESS: 100, A_TOKEN0_ADDRESS: 50, TOKEN1_ADDRESS: 7}
    caller = _CallerStub(lambda address, function_name, arguments: balances[address])

    reserves = Web3BalanceReader(caller=caller).adapter_read_reserves(_build_pool(), 1234)

    assert (reserves.reserve0, reserves.reserve1) == (150, 7)
    assert {call[3] for call in caller.calls} == {1234}
    assert {call[1] for call in caller.calls} == {"balanceOf"}


def test_balance_reader_uses_native_balance_for_zero_address_token() -> None:
    """Read the native balance when a pool token is the native currency."""

    caller = _CallerStub(lambda address, function_name, arguments: 3, native_balance=10**18)

    reserves = Web3BalanceReader(caller=caller).adapter_read_reserves(_build_pool(token0=ZERO_ADDRESS, a_token0=None), 5)

    assert reserves.reserve0 == 10**18
    assert reserves.reserve1 == 3


def test_balance_reader_treats_reverted_wrapped_probe_as_zero() -> None:
    """Count a reverting wrapped-token balance as zero."""

    def _resolve(address: str, function_name: str, arguments: tuple) -> int:
        if address == A_TOKEN0_ADDRESS:
            raise _reverted(function_name)
        return 9

    reserves = Web3BalanceReader(caller=_CallerStub(_resolve)).adapter_read_reserves(_build_pool(), 5)

    assert (reserves.reserve0, reserves.reserve1) == (9, 9)


def test_balance_reader_propagates_idle_balance_failures() -> None:
    """Raise when the idle balance itself cannot be read."""

    def _resolve(address: str, function_name: str, arguments: tuple) -> int:
        raise ChainConnectionError("rpc down", contract_address=address)

    with pytest.raises(ChainConnectionError):
        Web3BalanceReader(caller=_CallerStub(_resolve)).adapter_read_reserves(_build_pool(), 5)


def test_token_metadata_defaults_each_failed_probe() -> None:
    """Default only the fields whose probe failed.

    Returns:
        None: Assertions validate field-wise defaults.

    Raises:
        AssertionError: Raised when one failure discards other fields.
    """

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        if function_name == "name":
            raise _reverted(function_name)
        return {"symbol": "WETH", "decimals": 18}[function_name]

    metadata = Web3TokenMetadataReader(caller=_CallerStub(_resolve)).adapter_read_token_metadata(TOKEN1_ADDRESS)

    assert metadata == TokenMetadata(symbol="WETH", name="", decimals=18)


def test_token_metadata_for_native_currency_skips_calls() -> None:
    """Return native-currency metadata for the zero address."""

    caller = _CallerStub(lambda address, function_name, arguments: pytest.fail("unexpected call"))

    metadata = Web3TokenMetadataReader(caller=caller).adapter_read_token_metadata(ZERO_ADDRESS)

    assert metadata == TokenMetadata(symbol="ETH", name="Ether", decimals=18)
    assert caller.calls == []


def test_hook_reader_normalizes_wrapped_tokens_and_tolerates_revert() -> None:
    """Lowercase returned wrapped-token addresses and map a revert to None."""

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        if function_name == "aToken1":
            raise _reverted(function_name)
        return "0x" + "A0" * 20

    wrapped_tokens = Web3HookContractReader(caller=_CallerStub(_resolve)).adapter_read_wrapped_tokens(HOOK_ADDRESS, 9)

    assert wrapped_tokens.a_token0 == A_TOKEN0_ADDRESS
    assert wrapped_tokens.a_token1 is None


def test_hook_reader_converts_liquidity_to_amounts() -> None:
    """Return the hook's signed amounts for a liquidity value."""

    caller = _CallerStub(lambda address, function_name, arguments: [-5, 6])

    amounts = Web3HookContractReader(caller=caller).adapter_token_amounts_for_liquidity(HOOK_ADDRESS, 77, 9)

    assert amounts == (-5, 6)
    assert caller.calls == [(HOOK_ADDRESS, "getTokenAmountsForLiquidity", (77,), 9)]


def test_price_oracle_quote_token_is_one_without_calls() -> None:
    """Price the quote token at exactly one without any contract call."""

    caller = _CallerStub(lambda address, function_name, arguments: pytest.fail("unexpected call"))
    oracle = Web3PriceOracle(
        caller=caller,
        quote_token_address=QUOTE_TOKEN_ADDRESS.upper().replace("0X", "0x"),
        primary_quoter_address=PRIMARY_QUOTER_ADDRESS,
    )

    assert oracle.adapter_quote_token_usd(QUOTE_TOKEN_ADDRESS, 6, 10) == Decimal("1")


def test_price_oracle_uses_first_primary_fee_tier_that_quotes() -> None:
    """Walk primary fee tiers in order and stop at the first non-zero quote.

    Returns:
        None: Assertions validate price and tried tiers.

    Raises:
        AssertionError: Raised when tier order or scaling is wrong.
    """

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        if function_name == "decimals":
            return 6
        fee = arguments[0][3]
        if fee == 100:
            raise _reverted(function_name)
        if fee == 500:
            return (0, 0, 0, 0)
        return (2_000_500_000, 0, 0, 0)

    caller = _CallerStub(_resolve)
    oracle = Web3PriceOracle(
        caller=caller,
        quote_token_address=QUOTE_TOKEN_ADDRESS,
        primary_quoter_address=PRIMARY_QUOTER_ADDRESS,
    )

    price = oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, 42)
    oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, 43)

    assert price == Decimal("2000.5")
    assert [call[2][0][3] for call in caller.calls[:3]] == [100, 500, 3000]
    assert caller.calls[0][2][0][2] == 10**18
    assert caller.calls[0][3] == 42
    assert [call[:2] for call in caller.calls if call[1] == "decimals"] == [(QUOTE_TOKEN_ADDRESS, "decimals")]


def test_price_oracle_does_not_cache_failed_decimals_read(caplog) -> None:
    """Quote zero while the quote token decimals are unreadable, then recover.

    Returns:
        None: Assertions validate the zero quote and the later correct price.

    Raises:
        AssertionError: Raised when a failed decimals read leaks into later prices.
    """

    decimals_outcomes: list[Any] = [ChainConnectionError("decimals call failed"), 6]

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        if function_name == "decimals":
            outcome = decimals_outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return (2_000 * 10**6, 0, 0, 0)

    caller = _CallerStub(_resolve)
    oracle = Web3PriceOracle(
        caller=caller,
        quote_token_address=QUOTE_TOKEN_ADDRESS,
        primary_quoter_address=PRIMARY_QUOTER_ADDRESS,
    )

    first_price = oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, 42)
    second_price = oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, 43)
    third_price = oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, 44)

    assert first_price == Decimal("0")
    assert "quote token decimals read failed" in caplog.text
    assert second_price == Decimal("2000")
    assert third_price == Decimal("2000")
    assert [call[3] for call in caller.calls if call[1] == "decimals"] == [42, 43]


def test_price_oracle_falls_back_to_pool_key_quoter() -> None:
    """Try the fallback quoter with an ordered pool key when the primary never quotes."""

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        if function_name == "decimals":
            return 6
        if address == PRIMARY_QUOTER_ADDRESS:
            raise _reverted(function_name)
        pool_key, zero_for_one, amount_in, hook_data = arguments[0]
        if pool_key[2] == 500 and pool_key[3] == 10:
            return (3 * 10**6, 0)
        raise _reverted(function_name)

    caller = _CallerStub(_resolve)
    oracle = Web3PriceOracle(
        caller=caller,
        quote_token_address=QUOTE_TOKEN_ADDRESS,
        primary_quoter_address=PRIMARY_QUOTER_ADDRESS,
        fallback_quoter_address=FALLBACK_QUOTER_ADDRESS,
    )

    price = oracle.adapter_quote_token_usd(TOKEN0_ADDRESS, 6, 42)

    fallback_call = [call for call in caller.calls if call[0] == FALLBACK_QUOTER_ADDRESS][-1]
    pool_key, zero_for_one, amount_in, hook_data = fallback_call[2][0]
    assert price == Decimal("3")
    assert zero_for_one is True
    assert (pool_key[0].lower(), pool_key[1].lower()) == (TOKEN0_ADDRESS, QUOTE_TOKEN_ADDRESS)
    assert pool_key[4].lower() == ZERO_ADDRESS
    assert (amount_in, hook_data) == (10**6, b"")


def test_price_oracle_returns_zero_when_nothing_quotes(caplog) -> None:
    """Return zero and log when every quote path fails."""

    def _resolve(address: str, function_name: str, arguments: tuple) -> Any:
        raise _reverted(function_name)

    oracle = Web3PriceOracle(
        caller=_CallerStub(_resolve),
        quote_token_address=QUOTE_TOKEN_ADDRESS,
        primary_quoter_address=PRIMARY_QUOTER_ADDRESS,
        fallback_quoter_address=FALLBACK_QUOTER_ADDRESS,
    )

    assert oracle.adapter_quote_token_usd(TOKEN1_ADDRESS, 18, None) == Decimal("0")
    assert "no quote path" in caplog.text


class _FakeContractFunction:
    def __init__(self, outcome: Any) -> None:
        self._outcome = outcome
        self.block_identifier = None

    def call(self, block_identifier=None):
        self.block_identifier = block_identifier
        if isinstance(self._outcome, Exception):
            raise self._outcome
        return self._outcome


class _FakeWeb3:
    """Minimal stand-in for the web3 client surface used by the contract caller."""

    def __init__(self, outcome: Any) -> None:
        self.function = _FakeContractFunction(outcome)
        self.eth = self
        self.contract_requests: list[str] = []

    def contract(self, address, abi):
        """Return an object exposing `functions.<name>(*args)`."""

        _ = abi
        self.contract_requests.append(address)
        function = self.function

        class _Functions:
            def __getattr__(self, name):
                return lambda *arguments: function

        class _Contract:
            functions = _Functions()

        return _Contract()

    def get_balance(self, address, block_identifier):
        """Return or raise the configured outcome."""

        _ = (address, block_identifier)
        return self.function.call(block_identifier)


def test_contract_caller_checksums_address_and_passes_block() -> None:
    """Call the contract at a checksummed address and requested block."""

    fake_web3 = _FakeWeb3(outcome=123)

    result = Web3ContractCaller(web3=fake_web3).chain_call(TOKEN0_ADDRESS, [], "balanceOf", (HOOK_ADDRESS,), 77)

    assert result == 123
    assert fake_web3.function.block_identifier == 77
    assert fake_web3.contract_requests[0].lower() == TOKEN0_ADDRESS
    assert fake_web3.contract_requests[0] != TOKEN0_ADDRESS


@pytest.mark.parametrize(
    ("outcome", "expected_error"),
    [
        (ContractLogicError("execution reverted"), ChainCallRevertedError),
        (ConnectionError("connection refused"), ChainConnectionError),
    ],
)
def test_contract_caller_maps_failures_to_chain_errors(outcome: Exception, expected_error: type) -> None:
    """Translate reverts and transport failures into project chain errors."""

    with pytest.raises(expected_error) as error_info:
        Web3ContractCaller(web3=_FakeWeb3(outcome=outcome)).chain_call(TOKEN0_ADDRESS, [], "symbol")
    assert error_info.value.contract_address == TOKEN0_ADDRESS


def test_contract_caller_native_balance_defaults_to_latest() -> None:
    """Read native balances at the latest block when no block is given."""

    fake_web3 = _FakeWeb3(outcome=5)

    assert Web3ContractCaller(web3=fake_web3).chain_native_balance(HOOK_ADDRESS) == 5
    assert fake_web3.function.block_identifier == "latest"

"""Adapter layer package for on-chain read boundaries."""

from .chain_errors import ChainCallRevertedError, ChainConnectionError, ChainReadError
from .interfaces import (
	BalanceReaderPort,
	HookContractPort,
	PriceOraclePort,
	TokenMetadata,
	TokenMetadataPort,
	WrappedTokenAddresses,
)
from .web3_chain import (
	DEFAULT_QUOTE_FEE_TIERS,
	DEFAULT_QUOTE_TICK_SPACINGS,
	Web3BalanceReader,
	Web3ContractCaller,
	Web3HookContractReader,
	Web3PriceOracle,
	Web3TokenMetadataReader,
	adapter_create_web3,
)

__all__ = [
	"BalanceReaderPort",
	"ChainCallRevertedError",
	"ChainConnectionError",
	"ChainReadError",
	"DEFAULT_QUOTE_FEE_TIERS",
	"DEFAULT_QUOTE_TICK_SPACINGS",
	"HookContractPort",
	"PriceOraclePort",
	"TokenMetadata",
	"TokenMetadataPort",
	"Web3BalanceReader",
	"Web3ContractCaller",
	"Web3HookContractReader",
	"Web3PriceOracle",
	"Web3TokenMetadataReader",
	"WrappedTokenAddresses",
	"adapter_create_web3",
]

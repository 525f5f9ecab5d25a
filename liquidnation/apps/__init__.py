"""
Liquid Nation application contracts.

This package provides:
- swap: the order book contract
- escrow: the escrow contract
- conservation: token conservation rules shared by both
- dispatch: entry points and the per-transaction host driver
"""

from .operations import Operation

from .validation import (
    Contract,
    ValidationResult,
)

from .conservation import (
    sum_token_amount,
    check_conservation,
    require_backing,
)

from .swap import SwapContract
from .escrow import EscrowContract

from .dispatch import (
    CONTRACTS,
    get_contract,
    validate_swap,
    validate_escrow,
    TransactionVerdict,
    check_transaction,
)

__all__ = [
    "Operation",
    "Contract",
    "ValidationResult",
    # Conservation
    "sum_token_amount",
    "check_conservation",
    "require_backing",
    # Contracts
    "SwapContract",
    "EscrowContract",
    # Dispatch
    "CONTRACTS",
    "get_contract",
    "validate_swap",
    "validate_escrow",
    "TransactionVerdict",
    "check_transaction",
]

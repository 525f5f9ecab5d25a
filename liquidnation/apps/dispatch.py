"""
Entry points: per-app validation and the per-transaction host driver.

The host runs a contract once for every distinct app present in a
transaction and accepts the transaction only if every app accepts.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..chain.primitives import Transaction
from ..chain.refs import App
from .escrow import EscrowContract
from .swap import SwapContract
from .validation import Contract, ValidationResult

log = logging.getLogger(__name__)

CONTRACTS: Dict[str, Contract] = {
    SwapContract.name: SwapContract(),
    EscrowContract.name: EscrowContract(),
}


def get_contract(name: str) -> Contract:
    try:
        return CONTRACTS[name]
    except KeyError:
        raise ValueError(f"Unknown contract: {name} (expected one of {sorted(CONTRACTS)})")


def validate_swap(app: App, tx: Transaction, public_input: bytes, witness: bytes) -> bool:
    """Swap order book entry point."""
    return CONTRACTS["swap"].validate(app, tx, public_input, witness)


def validate_escrow(app: App, tx: Transaction, public_input: bytes, witness: bytes) -> bool:
    """Escrow entry point."""
    return CONTRACTS["escrow"].validate(app, tx, public_input, witness)


# =============================================================================
# Host driver
# =============================================================================

@dataclass
class TransactionVerdict:
    """Per-app results for one transaction."""
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.ok for r in self.results)

    @property
    def rejected(self) -> List[ValidationResult]:
        return [r for r in self.results if not r.ok]

    def __str__(self):
        return "\n".join(str(r) for r in self.results)


def check_transaction(
    tx: Transaction,
    public_inputs: Mapping[App, bytes],
    witnesses: Mapping[App, bytes],
    contracts_by_vk: Optional[Mapping[bytes, Contract]] = None,
    default: Optional[Contract] = None,
) -> TransactionVerdict:
    """
    Run the matching contract for every distinct app in the transaction.

    The contract is looked up by the app's vk, falling back to `default`.
    Apps without a public input or witness get empty bytes.
    """
    contracts_by_vk = contracts_by_vk or {}
    verdict = TransactionVerdict()
    for app in tx.apps():
        contract = contracts_by_vk.get(app.vk, default)
        if contract is None:
            raise ValueError(f"No contract for app {app}")
        result = contract.check(app, tx, public_inputs.get(app, b""), witnesses.get(app, b""))
        log.debug("%s", result)
        verdict.results.append(result)
    return verdict

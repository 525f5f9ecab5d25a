"""
Liquid Nation chain layer - what the validator reads from a transaction.

This package provides:
- refs: App and UtxoId references and their text parser
- primitives: hashing, the Data payload codec, Transaction and charm extraction
- types: order, escrow and witness records
"""

from .refs import (
    App,
    UtxoId,
    parse_app,
    parse_utxo_id,
)

from .primitives import (
    hash_bytes,
    hash_str,
    Data,
    Charms,
    Transaction,
    charm_values,
    decode_charms,
)

from .types import (
    OrderStatus,
    SwapOrder,
    EscrowStatus,
    EscrowType,
    TwoParty,
    TwoOfTwo,
    TwoOfThree,
    EscrowTerms,
    Escrow,
    FillData,
    ReleaseProof,
    RefundRequest,
    DisputeData,
)

__all__ = [
    # Refs
    "App",
    "UtxoId",
    "parse_app",
    "parse_utxo_id",
    # Primitives
    "hash_bytes",
    "hash_str",
    "Data",
    "Charms",
    "Transaction",
    "charm_values",
    "decode_charms",
    # Types
    "OrderStatus",
    "SwapOrder",
    "EscrowStatus",
    "EscrowType",
    "TwoParty",
    "TwoOfTwo",
    "TwoOfThree",
    "EscrowTerms",
    "Escrow",
    "FillData",
    "ReleaseProof",
    "RefundRequest",
    "DisputeData",
]

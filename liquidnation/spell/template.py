"""
Spell templates: `${name}` substitution plus the variable sets used for the
create-order and fill-order spells.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

from ..params import DEST_CHAIN_BITCOIN
from .loader import SpellError

PLACEHOLDER = re.compile(r"\$\{([A-Za-z0-9_]+)\}")


def missing_variables(template: str, variables: Mapping[str, str]) -> List[str]:
    """Placeholders in the template that have no value, sorted."""
    return sorted({name for name in PLACEHOLDER.findall(template) if name not in variables})


def render_template(template: str, variables: Mapping[str, str], strict: bool = False) -> str:
    """
    Replace every `${key}` with its value.

    Placeholders without a value are left in place unless `strict` is set,
    in which case they raise SpellError.
    """
    if strict:
        missing = missing_variables(template, variables)
        if missing:
            raise SpellError(f"Unresolved template variables: {', '.join(missing)}")
    spell = template
    for key, value in variables.items():
        spell = spell.replace(f"${{{key}}}", str(value))
    return spell


def _flag(value: bool) -> str:
    return "true" if value else "false"


# =============================================================================
# Order spells
# =============================================================================

@dataclass
class OrderSpellData:
    """
    Inputs for a create-order spell. Keys, ids and addresses are hex strings.

    There is no token vk: the contract only counts tokens minted by its own
    binary, so the offered and wanted tokens always use the order app_vk.
    """
    maker_address: str
    maker_pubkey: str
    offer_token_id: str
    offer_amount: str
    want_token_id: str
    want_amount: str
    expiry_height: int
    allow_partial: bool
    funding_utxo: str
    escrow_address: str
    dest_chain: int = DEST_CHAIN_BITCOIN
    dest_address: str = ""


@dataclass
class FillSpellData:
    order_utxo: str
    taker_utxo: str
    taker_pubkey: str
    taker_address: str
    maker_address: str
    offer_amount: str
    want_amount: str
    fill_amount: Optional[str] = None


def create_order_variables(data: OrderSpellData, app_id: str, app_vk: str) -> Dict[str, str]:
    return {
        # App configuration
        "app_id": app_id,
        "app_vk": app_vk,
        # Tokens
        "offer_token_id": data.offer_token_id,
        "want_token_id": data.want_token_id,
        # Order details
        "maker_pubkey": data.maker_pubkey,
        "offer_amount": data.offer_amount,
        "want_amount": data.want_amount,
        "expiry_height": str(data.expiry_height),
        "allow_partial": _flag(data.allow_partial),
        # UTXOs and addresses
        "in_utxo_0": data.funding_utxo,
        "addr_escrow": data.escrow_address,
        # Cross-chain
        "dest_chain": str(data.dest_chain),
        "dest_address": data.dest_address,
        # Defaults
        "min_fill_amount": "0",
        "current_height": "0",
    }


def fill_order_variables(data: FillSpellData, order: OrderSpellData,
                         app_id: str, app_vk: str) -> Dict[str, str]:
    return {
        "app_id": app_id,
        "app_vk": app_vk,
        "offer_token_id": order.offer_token_id,
        "want_token_id": order.want_token_id,
        # Order state
        "order_utxo": data.order_utxo,
        "taker_utxo": data.taker_utxo,
        "maker_pubkey": order.maker_pubkey,
        "taker_pubkey": data.taker_pubkey,
        # Amounts
        "offer_amount": data.offer_amount,
        "want_amount": data.want_amount,
        "fill_amount": data.fill_amount if data.fill_amount is not None else data.offer_amount,
        # Addresses
        "addr_maker": data.maker_address,
        "addr_taker": data.taker_address,
        # Order metadata
        "dest_chain": str(order.dest_chain),
        "dest_address": order.dest_address,
        "expiry_height": str(order.expiry_height),
        "allow_partial": _flag(order.allow_partial),
        "min_fill_amount": "0",
        "created_at": "0",
    }

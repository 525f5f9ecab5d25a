"""
Token conservation: no application may mint its fungible token in an
ordinary transaction.
"""

from typing import Iterable

from ..chain.primitives import Charms, Transaction, charm_values
from ..chain.refs import App
from ..errors import ConservationViolation, StructuralError
from ..params import U64_MAX


def sum_token_amount(app: App, charms_seq: Iterable[Charms]) -> int:
    """Total amount of `app` tokens across the given charm sets."""
    total = 0
    for data in charm_values(app, charms_seq):
        amount = data.value
        if isinstance(amount, bool) or not isinstance(amount, int) or not 0 <= amount <= U64_MAX:
            raise StructuralError("token amount must be a u64", app=str(app))
        total += amount
        if total > U64_MAX:
            raise StructuralError("token amount sum overflows u64", app=str(app))
    return total


def check_conservation(app: App, tx: Transaction):
    """Output sum must not exceed input sum for this token."""
    inputs = sum_token_amount(app, tx.input_charms())
    outputs = sum_token_amount(app, tx.outs)
    if outputs > inputs:
        raise ConservationViolation("token outputs exceed inputs",
                                    inputs=inputs, outputs=outputs, app=str(app))


def require_backing(token: App, charms_seq: Iterable[Charms], amount: int, what: str):
    """
    The charm sets must carry at least `amount` of `token`.

    Used where a record declares a holding that has to be backed by real
    tokens in the same transaction.
    """
    present = sum_token_amount(token, charms_seq)
    if present < amount:
        raise ConservationViolation(f"{what} amount not backed by tokens",
                                    required=amount, present=present, app=str(token))

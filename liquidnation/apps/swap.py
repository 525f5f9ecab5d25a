"""
Swap order book contract.

An order NFT (tag `n`) records one maker's offer: `offer_amount` of one
token for `want_amount` of another. Orders are created Open, filled in one
go or in parts when `allow_partial` is set, or cancelled by the maker.
Tokens (tag `t`) of the same contract binary obey plain conservation.

    Open --partial_fill--> Open
    Open --partial_fill--> Filled   (output record, filled_amount == offer_amount)
    Open --fill----------> (consumed)
    Open --cancel--------> (consumed)
"""

from dataclasses import replace
from typing import Dict

from ..chain.primitives import Data, Transaction
from ..chain.refs import App
from ..chain.types import FillData, OrderStatus, SwapOrder
from ..errors import ConservationViolation, InvariantViolation
from ..params import TOKEN
from .conservation import require_backing, sum_token_amount
from .operations import Operation
from .validation import (
    Contract, Handler, bind_identity, no_outputs, require_status,
    single_input, single_output,
)


def validate_order_creation(app: App, tx: Transaction, w: Data):
    bind_identity(app, tx, w)

    order = single_output(app, tx, SwapOrder)
    require_status(order, OrderStatus.OPEN)
    if order.filled_amount != 0:
        raise InvariantViolation("new order must be unfilled", filled_amount=order.filled_amount)
    if order.offer_amount == 0:
        raise InvariantViolation("offer_amount must be positive")
    if order.want_amount == 0:
        raise InvariantViolation("want_amount must be positive")

    offered = app.with_tag(TOKEN, order.offer_app_id)
    require_backing(offered, tx.outs, order.offer_amount, "offered")


def validate_order_fill(app: App, tx: Transaction, w: Data):
    """Full fill: the order is consumed and the taker pays the wanted amount."""
    FillData.from_data(w)

    order = single_input(app, tx, SwapOrder)
    require_status(order, OrderStatus.OPEN)
    no_outputs(app, tx)

    wanted = app.with_tag(TOKEN, order.want_app_id)
    supplied = sum_token_amount(wanted, tx.input_charms())
    if supplied < order.want_amount:
        raise ConservationViolation("taker does not supply the wanted amount",
                                    required=order.want_amount, present=supplied)


def validate_partial_fill(app: App, tx: Transaction, w: Data):
    fill = FillData.from_data(w)

    order = single_input(app, tx, SwapOrder)
    if not order.allow_partial:
        raise InvariantViolation("order does not allow partial fills")
    require_status(order, OrderStatus.OPEN)
    if order.filled_amount > order.offer_amount:
        raise InvariantViolation("input order is overfilled",
                                 filled_amount=order.filled_amount,
                                 offer_amount=order.offer_amount)

    updated = single_output(app, tx, SwapOrder)

    if not 0 < fill.fill_amount <= order.remaining:
        raise InvariantViolation("fill_amount out of range",
                                 fill_amount=fill.fill_amount, remaining=order.remaining)

    new_filled = order.filled_amount + fill.fill_amount
    if updated.filled_amount != new_filled:
        raise InvariantViolation("filled_amount does not match the fill",
                                 expected=new_filled, actual=updated.filled_amount)

    # Only the fill progress may change; terms carry over as they were
    if replace(updated, filled_amount=order.filled_amount, status=order.status) != order:
        raise InvariantViolation("partial fill modified the order terms")
    if updated.filled_amount > updated.offer_amount:
        raise InvariantViolation("output order is overfilled",
                                 filled_amount=updated.filled_amount,
                                 offer_amount=updated.offer_amount)

    if new_filled >= order.offer_amount:
        require_status(updated, OrderStatus.FILLED)
    else:
        require_status(updated, OrderStatus.OPEN)


def validate_order_cancel(app: App, tx: Transaction, w: Data):
    # Spending the order UTXO is the maker's authorization
    order = single_input(app, tx, SwapOrder)
    require_status(order, OrderStatus.OPEN)
    no_outputs(app, tx)


class SwapContract(Contract):
    """Order book contract: order NFTs plus token conservation."""
    name = "swap"
    record_type = SwapOrder

    def handlers(self) -> Dict[Operation, Handler]:
        return {
            Operation.CREATE: validate_order_creation,
            Operation.FILL: validate_order_fill,
            Operation.PARTIAL_FILL: validate_partial_fill,
            Operation.CANCEL: validate_order_cancel,
            Operation.TRANSFER: self.transfer,
        }

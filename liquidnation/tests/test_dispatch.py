"""
Tests for operation routing, the entry points and the transaction driver.
"""

import pytest

from liquidnation.apps import (
    CONTRACTS, Operation, check_transaction, get_contract, validate_escrow,
    validate_swap,
)
from liquidnation.chain import App, Data, FillData, Transaction
from liquidnation.errors import StructuralError

from .builders import (
    ASSET_A, ASSET_B, OTHER_VK, TAKER, VK, amount, encode, make_escrow,
    make_order, token, utxo,
)


def fill_witness() -> bytes:
    return FillData(taker_pubkey=TAKER, fill_amount=1000,
                    taker_dest_address=b"").to_data().to_bytes()


# =============================================================================
# Operation selector
# =============================================================================

class TestOperation:

    @pytest.mark.parametrize("raw,expected", [
        (None, Operation.TRANSFER),
        ("create", Operation.CREATE),
        ("partial_fill", Operation.PARTIAL_FILL),
        ("resolve", Operation.RESOLVE),
    ])
    def test_decode(self, raw, expected):
        assert Operation.decode(Data(raw)) is expected

    @pytest.mark.parametrize("raw", ["burn", "CREATE", "", 1, ["create"]])
    def test_rejects(self, raw):
        with pytest.raises(StructuralError):
            Operation.decode(Data(raw))

    def test_str(self):
        assert str(Operation.PARTIAL_FILL) == "partial_fill"
        assert str(Operation.TRANSFER) == "transfer"


# =============================================================================
# Routing
# =============================================================================

class TestRouting:

    def test_unknown_tag(self, swap):
        app = App("x", ASSET_A, VK)
        result = swap.check(app, Transaction(), b"", b"")
        assert result.violation.code == "STRUCTURAL"

    @pytest.mark.parametrize("public_input", [b"{not json", b"42", encode("burn")])
    def test_bad_public_input(self, swap, order_app, public_input):
        result = swap.check(order_app, Transaction(), public_input, b"")
        assert result.violation.code == "STRUCTURAL"

    def test_undecodable_witness(self, swap, order_app):
        order = make_order()
        tx = Transaction(
            ins=[(utxo("order"), {order_app: order.to_data()})],
            outs=[],
        )
        result = swap.check(order_app, tx, encode("fill"), b"\xff\xfe")
        assert result.violation.code == "STRUCTURAL"

    def test_nested_public_input_rejects(self, swap, order_app):
        nested = b"[" * 200000 + b"]" * 200000
        assert not swap.validate(order_app, Transaction(), nested, b"")

    def test_nested_witness_rejects(self, swap, order_app):
        tx = Transaction(ins=[(utxo("order"), {order_app: make_order().to_data()})])
        result = swap.check(order_app, tx, encode("fill"), b'{"a":' * 100000 + b"1" + b"}" * 100000)
        assert result.violation.code == "STRUCTURAL"

    def test_escrow_operation_on_swap(self, swap, order_app):
        result = swap.check(order_app, Transaction(), encode("release"), b"")
        assert result.violation.code == "STRUCTURAL"
        assert result.operation is Operation.RELEASE

    def test_undecodable_record_rejects(self, swap, order_app):
        tx = Transaction(
            ins=[(utxo("order"), {order_app: make_order().to_data()})],
            outs=[{order_app: Data({"status": "Open"})}],
        )
        result = swap.check(order_app, tx, b"", b"")
        assert result.violation.code == "STRUCTURAL"

    def test_deterministic(self, swap, order_app):
        tx = Transaction(
            ins=[(utxo("order"), {order_app: make_order().to_data()})],
            outs=[{order_app: make_order(offer_amount=1).to_data()}],
        )
        first = swap.check(order_app, tx, b"", b"")
        second = swap.check(order_app, tx, b"", b"")
        assert first.ok == second.ok
        assert first.violation.to_dict() == second.violation.to_dict()

    def test_result_str(self, swap, order_app):
        result = swap.check(order_app, Transaction(), encode("burn"), b"")
        assert str(result).startswith("[rejected]")


# =============================================================================
# Entry points
# =============================================================================

class TestEntryPoints:

    def test_get_contract(self):
        assert get_contract("swap") is CONTRACTS["swap"]
        assert get_contract("escrow").name == "escrow"

    def test_unknown_contract(self):
        with pytest.raises(ValueError):
            get_contract("lending")

    def test_validate_swap(self, order_app):
        order = make_order()
        tx = Transaction(
            ins=[(utxo("order"), {order_app: order.to_data()})],
            outs=[{order_app: order.to_data()}],
        )
        assert validate_swap(order_app, tx, b"", b"")
        assert not validate_swap(order_app, tx, encode("cancel"), b"")

    def test_validate_escrow(self, escrow_app):
        record = make_escrow()
        tx = Transaction(
            ins=[(utxo("escrow"), {escrow_app: record.to_data()})],
            outs=[{escrow_app: record.to_data()}],
        )
        assert validate_escrow(escrow_app, tx, b"", b"")
        assert not validate_escrow(escrow_app, tx, encode("release"), b"")


# =============================================================================
# Transaction driver
# =============================================================================

class TestCheckTransaction:

    def fill_tx(self, order_app, supplied=500):
        order = make_order()
        return Transaction(
            ins=[
                (utxo("order"), {order_app: order.to_data(), token(ASSET_A): amount(1000)}),
                (utxo("taker"), {token(ASSET_B): amount(supplied)}),
            ],
            outs=[
                {token(ASSET_B): amount(supplied)},
                {token(ASSET_A): amount(1000)},
            ],
        )

    def test_full_fill_accepted(self, order_app):
        tx = self.fill_tx(order_app)
        verdict = check_transaction(
            tx,
            public_inputs={order_app: encode("fill")},
            witnesses={order_app: fill_witness()},
            default=get_contract("swap"),
        )
        assert verdict.ok, str(verdict)
        assert [r.app for r in verdict.results] == [order_app, token(ASSET_A), token(ASSET_B)]

    def test_any_rejection_rejects(self, order_app):
        tx = self.fill_tx(order_app)
        tx.outs.append({token(ASSET_B): amount(1)})
        verdict = check_transaction(
            tx,
            public_inputs={order_app: encode("fill")},
            witnesses={order_app: fill_witness()},
            default=get_contract("swap"),
        )
        assert not verdict.ok
        assert [r.app for r in verdict.rejected] == [token(ASSET_B)]

    def test_contract_by_vk(self, order_app):
        foreign = token(ASSET_A, vk=OTHER_VK)
        tx = Transaction(ins=[(utxo("in"), {foreign: amount(5)})], outs=[{foreign: amount(5)}])
        verdict = check_transaction(tx, {}, {}, contracts_by_vk={OTHER_VK: get_contract("escrow")})
        assert verdict.ok

    def test_missing_contract(self):
        a = token(ASSET_A)
        tx = Transaction(ins=[(utxo("in"), {a: amount(5)})], outs=[])
        with pytest.raises(ValueError):
            check_transaction(tx, {}, {})

"""
Escrow contract.

An escrow NFT (tag `n`) holds `held_amount` of a token on behalf of a
depositor until it is released to the recipient, refunded, or, for
TwoOfThree escrows, disputed and resolved by the arbiter.

    Active   --release--> (consumed)
    Active   --refund---> (consumed)
    Expired  --refund---> (consumed)
    Active   --dispute--> Disputed
    Disputed --resolve--> (consumed)
"""

from typing import Dict

from ..chain.primitives import Data, Transaction, hash_bytes
from ..chain.refs import App
from ..chain.types import (
    DisputeData, Escrow, EscrowStatus, EscrowType, RefundRequest, ReleaseProof,
)
from ..errors import AuthorizationError, InvariantViolation
from ..params import TOKEN
from .conservation import require_backing
from .operations import Operation
from .validation import (
    Contract, Handler, bind_identity, no_outputs, require_status,
    single_input, single_output,
)


def validate_escrow_creation(app: App, tx: Transaction, w: Data):
    bind_identity(app, tx, w)

    escrow = single_output(app, tx, Escrow)
    require_status(escrow, EscrowStatus.ACTIVE)
    if escrow.held_amount == 0:
        raise InvariantViolation("held_amount must be positive")
    if escrow.expiry_height == 0:
        raise InvariantViolation("expiry_height must be positive")
    if not escrow.depositor_pubkey or not escrow.recipient_pubkey:
        raise InvariantViolation("depositor and recipient keys are required")
    if escrow.escrow_type is EscrowType.TWO_OF_THREE and not escrow.arbiter_pubkey:
        raise InvariantViolation("TwoOfThree escrow requires an arbiter key")

    held = app.with_tag(TOKEN, escrow.held_app_id)
    require_backing(held, tx.outs, escrow.held_amount, "held")


def validate_escrow_release(app: App, tx: Transaction, w: Data):
    proof = ReleaseProof.from_data(w)

    escrow = single_input(app, tx, Escrow)
    require_status(escrow, EscrowStatus.ACTIVE)

    if escrow.release_hash is not None and hash_bytes(proof.preimage) != escrow.release_hash:
        raise InvariantViolation("preimage does not match release_hash")

    # A single authorized signer; the spending transaction enforces the rest
    if proof.signer_pubkey not in escrow.authorized_signers():
        raise AuthorizationError("release signer not authorized",
                                 escrow_type=escrow.escrow_type.value)

    no_outputs(app, tx)


def validate_escrow_refund(app: App, tx: Transaction, w: Data):
    escrow = single_input(app, tx, Escrow)
    require_status(escrow, EscrowStatus.ACTIVE, EscrowStatus.EXPIRED)

    if escrow.status is not EscrowStatus.EXPIRED:
        # TODO: check the refund signer against depositor_pubkey once the
        # signature scheme for refund requests is fixed.
        RefundRequest.from_data(w)

    no_outputs(app, tx)


def validate_escrow_dispute(app: App, tx: Transaction, w: Data):
    dispute = DisputeData.from_data(w)

    escrow = single_input(app, tx, Escrow)
    require_status(escrow, EscrowStatus.ACTIVE)
    if escrow.escrow_type is not EscrowType.TWO_OF_THREE:
        raise InvariantViolation("only TwoOfThree escrows can be disputed",
                                 escrow_type=escrow.escrow_type.value)
    if dispute.initiator_pubkey not in (escrow.depositor_pubkey, escrow.recipient_pubkey):
        raise AuthorizationError("dispute initiator must be depositor or recipient")

    disputed = single_output(app, tx, Escrow)
    require_status(disputed, EscrowStatus.DISPUTED)


def validate_dispute_resolution(app: App, tx: Transaction, w: Data):
    proof = ReleaseProof.from_data(w)

    escrow = single_input(app, tx, Escrow)
    require_status(escrow, EscrowStatus.DISPUTED)
    if escrow.arbiter_pubkey is None or proof.signer_pubkey != escrow.arbiter_pubkey:
        raise AuthorizationError("only the arbiter can resolve a dispute")

    no_outputs(app, tx)


class EscrowContract(Contract):
    """Escrow contract: escrow NFTs plus token conservation."""
    name = "escrow"
    record_type = Escrow

    def handlers(self) -> Dict[Operation, Handler]:
        return {
            Operation.CREATE: validate_escrow_creation,
            Operation.RELEASE: validate_escrow_release,
            Operation.REFUND: validate_escrow_refund,
            Operation.DISPUTE: validate_escrow_dispute,
            Operation.RESOLVE: validate_dispute_resolution,
            Operation.TRANSFER: self.transfer,
        }

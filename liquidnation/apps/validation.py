"""
Validation pipeline shared by the swap and escrow contracts.

A contract routes a charm by tag: NFT charms go through the operation
selector to one of the contract's handlers, token charms go through the
conservation checker. Handlers raise CharmRejected on the first failing
rule; `Contract.check` turns that into a ValidationResult and
`Contract.validate` collapses it to the boolean the host expects.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Type, TypeVar

from ..chain.primitives import Data, Transaction, charm_values, decode_charms, hash_str
from ..chain.refs import App, parse_utxo_id
from ..errors import CharmRejected, CountError, InvariantViolation, StructuralError
from ..params import NFT, TOKEN
from .conservation import check_conservation
from .operations import Operation

log = logging.getLogger(__name__)

R = TypeVar('R')

Handler = Callable[[App, Transaction, Data], None]


@dataclass
class ValidationResult:
    """Outcome of checking one app against one transaction."""
    app: App
    operation: Optional[Operation] = None
    violation: Optional[CharmRejected] = None

    @property
    def ok(self) -> bool:
        return self.violation is None

    def __str__(self):
        op = f" {self.operation}" if self.operation is not None else ""
        if self.ok:
            return f"[ok] {self.app}{op}"
        return f"[rejected] {self.app}{op}: {self.violation}"


# =============================================================================
# Shared rules
# =============================================================================

def bind_identity(app: App, tx: Transaction, w: Data):
    """
    A new entity's identity must be the hash of the UTXO it is created from,
    and that UTXO must be spent by this transaction.
    """
    reference = w.value
    if not isinstance(reference, str):
        raise StructuralError("creation reference must be a UTXO id string")
    if hash_str(reference) != app.identity:
        raise InvariantViolation("identity is not the hash of the creation reference",
                                 reference=reference)
    if not tx.spends(parse_utxo_id(reference)):
        raise InvariantViolation("creation reference is not spent", reference=reference)


def single_input(app: App, tx: Transaction, record_type: Type[R]) -> R:
    records = decode_charms(app, tx.input_charms(), record_type)
    if len(records) != 1:
        raise CountError(f"expected one input {record_type.__name__}",
                         expected=1, actual=len(records))
    return records[0]


def single_output(app: App, tx: Transaction, record_type: Type[R]) -> R:
    records = decode_charms(app, tx.outs, record_type)
    if len(records) != 1:
        raise CountError(f"expected one output {record_type.__name__}",
                         expected=1, actual=len(records))
    return records[0]


def no_outputs(app: App, tx: Transaction):
    """Terminal operations leave no record of the entity behind."""
    count = sum(1 for _ in charm_values(app, tx.outs))
    if count:
        raise CountError("entity must be consumed", expected=0, actual=count)


def require_status(record, *allowed):
    if record.status not in allowed:
        raise InvariantViolation(
            f"{type(record).__name__} has wrong status",
            status=record.status.value,
            allowed=[s.value for s in allowed],
        )


def check_transfer(app: App, tx: Transaction, record_type: Type[R]):
    """Custody change only: records pass through pairwise unchanged."""
    ins: List = decode_charms(app, tx.input_charms(), record_type)
    outs: List = decode_charms(app, tx.outs, record_type)
    if len(ins) != len(outs):
        raise CountError("transfer must keep the number of records",
                         expected=len(ins), actual=len(outs))
    for index, (before, after) in enumerate(zip(ins, outs)):
        if before.custody_fields() != after.custody_fields():
            raise InvariantViolation(f"transfer modified {record_type.__name__}", index=index)


# =============================================================================
# Contract
# =============================================================================

class Contract:
    """
    Base for an application contract.

    Subclasses fill `record_type` and return their operation table from
    `handlers()`. Operations missing from the table are rejected.
    """
    name: str = "contract"
    record_type: type = None

    def handlers(self) -> Dict[Operation, Handler]:
        raise NotImplementedError

    def transfer(self, app: App, tx: Transaction, w: Data):
        check_transfer(app, tx, self.record_type)

    def check(self, app: App, tx: Transaction, public_input: bytes, witness: bytes) -> ValidationResult:
        result = ValidationResult(app=app)
        try:
            if app.tag == NFT:
                result.operation = Operation.decode(Data.from_bytes(public_input))
                handler = self.handlers().get(result.operation)
                if handler is None:
                    raise StructuralError(f"operation not supported by {self.name}",
                                          operation=str(result.operation))
                handler(app, tx, Data.from_bytes(witness))
            elif app.tag == TOKEN:
                check_conservation(app, tx)
            else:
                raise StructuralError("unknown app tag", tag=app.tag)
        except CharmRejected as e:
            result.violation = e
            log.debug("%s rejected %s: %s", self.name, app, e)
        return result

    def validate(self, app: App, tx: Transaction, public_input: bytes, witness: bytes) -> bool:
        return self.check(app, tx, public_input, witness).ok

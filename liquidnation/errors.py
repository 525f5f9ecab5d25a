"""
Rejection reasons raised while validating charms.

Every rule in the swap and escrow contracts is a hard precondition. The
first rule that fails raises one of the exceptions below; the dispatch
router catches them and turns them into a rejected ValidationResult, so
the host only ever sees accept or reject.

Classes
-------
CharmRejected (base)
 ├─ StructuralError       : public input, witness or record missing, mistyped or undecodable
 ├─ CountError            : wrong number of input/output records for the operation
 ├─ InvariantViolation    : a field-level rule is broken (amounts, status, keys)
 ├─ AuthorizationError    : signer not in the permitted set
 └─ ConservationViolation : token output sum exceeds input sum, or backing is missing
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class CharmRejected(Exception):
    """
    Why a charm failed validation.

    `code` names the rejection class and never changes between releases;
    `message` is for people reading logs. `data` carries the offending
    values (counts, amounts, statuses) as plain JSON types.
    """
    message: str = "rejected"
    code: str = "REJECTED"
    data: Optional[Dict[str, Any]] = field(default=None)

    def __str__(self) -> str:
        details = "" if not self.data else " " + ", ".join(
            f"{k}={v}" for k, v in sorted(self.data.items()))
        return f"[{self.code}] {self.message}{details}"

    def to_dict(self) -> Dict[str, Any]:
        result = dict(code=self.code, message=self.message)
        if self.data:
            result["data"] = dict(self.data)
        return result


class StructuralError(CharmRejected):
    def __init__(self, message: str = "malformed input", **data: Any):
        super().__init__(message=message, code="STRUCTURAL", data=data or None)


class CountError(CharmRejected):
    """
    Wrong number of charms for the operation.

    Carries the expected and actual counts so a rejected spell can be
    diagnosed without re-running it.
    """
    def __init__(self, message: str, *, expected: Optional[int] = None,
                 actual: Optional[int] = None, **data: Any):
        if expected is not None:
            data.setdefault("expected", expected)
        if actual is not None:
            data.setdefault("actual", actual)
        super().__init__(message=message, code="COUNT", data=data or None)


class InvariantViolation(CharmRejected):
    def __init__(self, message: str, **data: Any):
        super().__init__(message=message, code="INVARIANT", data=data or None)


class AuthorizationError(CharmRejected):
    def __init__(self, message: str = "signer not authorized", **data: Any):
        super().__init__(message=message, code="AUTHORIZATION", data=data or None)


class ConservationViolation(CharmRejected):
    def __init__(self, message: str, *, inputs: Optional[int] = None,
                 outputs: Optional[int] = None, **data: Any):
        if inputs is not None:
            data.setdefault("inputs", inputs)
        if outputs is not None:
            data.setdefault("outputs", outputs)
        super().__init__(message=message, code="CONSERVATION", data=data or None)


__all__ = [
    "CharmRejected",
    "StructuralError",
    "CountError",
    "InvariantViolation",
    "AuthorizationError",
    "ConservationViolation",
]

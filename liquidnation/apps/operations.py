"""
Operation selector carried in an NFT charm's public input.
"""

from enum import Enum

from ..chain.primitives import Data
from ..errors import StructuralError


class Operation(Enum):
    """
    Closed set of operations a contract can be asked to check.

    TRANSFER has no wire value: it is what an absent selector means.
    """
    TRANSFER = None
    CREATE = "create"
    FILL = "fill"
    PARTIAL_FILL = "partial_fill"
    CANCEL = "cancel"
    RELEASE = "release"
    REFUND = "refund"
    DISPUTE = "dispute"
    RESOLVE = "resolve"

    @classmethod
    def decode(cls, public_input: Data) -> 'Operation':
        if public_input.is_empty:
            return cls.TRANSFER
        selector = public_input.value
        if not isinstance(selector, str):
            raise StructuralError("operation selector must be a string",
                                  got=type(selector).__name__)
        try:
            return cls(selector)
        except ValueError as e:
            raise StructuralError("unrecognized operation", selector=selector) from e

    def __str__(self):
        return self.value or "transfer"

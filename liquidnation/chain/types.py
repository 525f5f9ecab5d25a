"""
Entity and witness records carried by the swap and escrow applications.

Records travel as Data payloads holding plain dicts: byte strings as hex,
enums by name, integers as ints. `from_data` checks the shape and raises
StructuralError on anything that does not decode; `to_data` produces the
canonical payload.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, Optional, Union

from ..errors import StructuralError
from ..params import B32_LEN, U8_MAX, U64_MAX
from .primitives import Data


# =============================================================================
# Field decoding helpers
# =============================================================================

def _fields(data: Data, record: str) -> Dict[str, Any]:
    if not isinstance(data, Data):
        raise StructuralError(f"{record}: expected Data", got=type(data).__name__)
    if not isinstance(data.value, dict):
        raise StructuralError(f"{record}: expected a map", got=type(data.value).__name__)
    return data.value


def _get(d: Dict[str, Any], key: str, record: str) -> Any:
    if key not in d:
        raise StructuralError(f"{record}: missing field", field=key)
    return d[key]


def _uint(d: Dict[str, Any], key: str, record: str, bound: int = U64_MAX) -> int:
    v = _get(d, key, record)
    # bool is an int subclass; refuse it explicitly
    if isinstance(v, bool) or not isinstance(v, int) or not 0 <= v <= bound:
        raise StructuralError(f"{record}: invalid integer", field=key)
    return v


def _bool(d: Dict[str, Any], key: str, record: str) -> bool:
    v = _get(d, key, record)
    if not isinstance(v, bool):
        raise StructuralError(f"{record}: invalid bool", field=key)
    return v


def _str(d: Dict[str, Any], key: str, record: str) -> str:
    v = _get(d, key, record)
    if not isinstance(v, str):
        raise StructuralError(f"{record}: invalid string", field=key)
    return v


def _hex(d: Dict[str, Any], key: str, record: str) -> bytes:
    v = _get(d, key, record)
    if not isinstance(v, str):
        raise StructuralError(f"{record}: invalid hex", field=key)
    try:
        return bytes.fromhex(v)
    except ValueError as e:
        raise StructuralError(f"{record}: invalid hex", field=key) from e


def _b32(d: Dict[str, Any], key: str, record: str) -> bytes:
    v = _hex(d, key, record)
    if len(v) != B32_LEN:
        raise StructuralError(f"{record}: expected 32 bytes", field=key, length=len(v))
    return v


def _optional(d: Dict[str, Any], key: str, record: str, decode) -> Any:
    if d.get(key) is None:
        return None
    return decode(d, key, record)


def _enum(d: Dict[str, Any], key: str, record: str, enum_cls):
    v = _get(d, key, record)
    try:
        return enum_cls(v)
    except ValueError as e:
        raise StructuralError(f"{record}: unknown {enum_cls.__name__}", field=key, value=v) from e


def _hex_or_none(v: Optional[bytes]) -> Optional[str]:
    return v.hex() if v is not None else None


# =============================================================================
# Swap orders
# =============================================================================

class OrderStatus(Enum):
    """Order lifecycle status."""
    OPEN = "Open"
    FILLED = "Filled"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"  # Only ever set by re-issuing the record, never by a transition


@dataclass(frozen=True)
class SwapOrder:
    """Order NFT content: one open offer in the order book."""
    maker_pubkey: bytes
    offer_app_id: bytes
    offer_amount: int
    want_app_id: bytes
    want_amount: int
    dest_chain: int          # 0 = Bitcoin, 1 = Cardano (routing hint only)
    dest_address: bytes
    expiry_height: int       # Data only, never compared to a live height
    allow_partial: bool
    status: OrderStatus
    filled_amount: int

    @property
    def remaining(self) -> int:
        return self.offer_amount - self.filled_amount

    def custody_fields(self) -> tuple:
        """Fields a plain transfer must carry over unchanged."""
        return (
            self.offer_app_id, self.offer_amount,
            self.want_app_id, self.want_amount,
            self.status, self.filled_amount,
        )

    def to_data(self) -> Data:
        return Data({
            "maker_pubkey": self.maker_pubkey.hex(),
            "offer_app_id": self.offer_app_id.hex(),
            "offer_amount": self.offer_amount,
            "want_app_id": self.want_app_id.hex(),
            "want_amount": self.want_amount,
            "dest_chain": self.dest_chain,
            "dest_address": self.dest_address.hex(),
            "expiry_height": self.expiry_height,
            "allow_partial": self.allow_partial,
            "status": self.status.value,
            "filled_amount": self.filled_amount,
        })

    @classmethod
    def from_data(cls, data: Data) -> 'SwapOrder':
        r = "SwapOrder"
        d = _fields(data, r)
        return cls(
            maker_pubkey=_hex(d, "maker_pubkey", r),
            offer_app_id=_b32(d, "offer_app_id", r),
            offer_amount=_uint(d, "offer_amount", r),
            want_app_id=_b32(d, "want_app_id", r),
            want_amount=_uint(d, "want_amount", r),
            dest_chain=_uint(d, "dest_chain", r, bound=U8_MAX),
            dest_address=_hex(d, "dest_address", r),
            expiry_height=_uint(d, "expiry_height", r),
            allow_partial=_bool(d, "allow_partial", r),
            status=_enum(d, "status", r, OrderStatus),
            filled_amount=_uint(d, "filled_amount", r),
        )


# =============================================================================
# Escrows
# =============================================================================

class EscrowStatus(Enum):
    ACTIVE = "Active"
    RELEASED = "Released"
    REFUNDED = "Refunded"
    EXPIRED = "Expired"
    DISPUTED = "Disputed"


class EscrowType(Enum):
    TWO_PARTY = "TwoParty"
    TWO_OF_TWO = "TwoOfTwo"
    TWO_OF_THREE = "TwoOfThree"


@dataclass(frozen=True)
class TwoParty:
    """Simple escrow: depositor or recipient may release."""
    escrow_type: ClassVar[EscrowType] = EscrowType.TWO_PARTY

    @property
    def arbiter_pubkey(self) -> Optional[bytes]:
        return None

    def authorized_signers(self, depositor: bytes, recipient: bytes) -> FrozenSet[bytes]:
        return frozenset((depositor, recipient))


@dataclass(frozen=True)
class TwoOfTwo(TwoParty):
    """
    Both parties must agree.

    Only one signer is checked here; the spending transaction's own
    signature requirements cover the other party.
    """
    escrow_type: ClassVar[EscrowType] = EscrowType.TWO_OF_TWO


@dataclass(frozen=True)
class TwoOfThree:
    """Depositor, recipient and an arbiter who can resolve disputes."""
    arbiter_pubkey: bytes
    escrow_type: ClassVar[EscrowType] = EscrowType.TWO_OF_THREE

    def authorized_signers(self, depositor: bytes, recipient: bytes) -> FrozenSet[bytes]:
        return frozenset((depositor, recipient, self.arbiter_pubkey))


EscrowTerms = Union[TwoParty, TwoOfTwo, TwoOfThree]


def _terms(d: Dict[str, Any], record: str) -> EscrowTerms:
    escrow_type = _enum(d, "escrow_type", record, EscrowType)
    arbiter = _optional(d, "arbiter_pubkey", record, _hex)
    if escrow_type is EscrowType.TWO_OF_THREE:
        if arbiter is None:
            raise StructuralError(f"{record}: TwoOfThree escrow requires an arbiter",
                                  field="arbiter_pubkey")
        return TwoOfThree(arbiter_pubkey=arbiter)
    if arbiter is not None:
        raise StructuralError(f"{record}: arbiter only allowed for TwoOfThree",
                              field="arbiter_pubkey", escrow_type=escrow_type.value)
    return TwoOfTwo() if escrow_type is EscrowType.TWO_OF_TWO else TwoParty()


@dataclass(frozen=True)
class Escrow:
    """Escrow NFT state: assets held until released, refunded or resolved."""
    escrow_id: bytes
    depositor_pubkey: bytes
    recipient_pubkey: bytes
    terms: EscrowTerms
    held_app_id: bytes
    held_amount: int
    release_hash: Optional[bytes]
    expiry_height: int
    status: EscrowStatus
    created_at: int = 0
    order_id: Optional[bytes] = None

    @property
    def escrow_type(self) -> EscrowType:
        return self.terms.escrow_type

    @property
    def arbiter_pubkey(self) -> Optional[bytes]:
        return self.terms.arbiter_pubkey

    def authorized_signers(self) -> FrozenSet[bytes]:
        return self.terms.authorized_signers(self.depositor_pubkey, self.recipient_pubkey)

    def custody_fields(self) -> tuple:
        return (
            self.escrow_id, self.depositor_pubkey, self.recipient_pubkey,
            self.terms, self.held_app_id, self.held_amount,
            self.release_hash, self.expiry_height, self.status, self.order_id,
        )

    def to_data(self) -> Data:
        return Data({
            "escrow_id": self.escrow_id.hex(),
            "depositor_pubkey": self.depositor_pubkey.hex(),
            "recipient_pubkey": self.recipient_pubkey.hex(),
            "arbiter_pubkey": _hex_or_none(self.arbiter_pubkey),
            "escrow_type": self.escrow_type.value,
            "held_app_id": self.held_app_id.hex(),
            "held_amount": self.held_amount,
            "release_hash": _hex_or_none(self.release_hash),
            "expiry_height": self.expiry_height,
            "status": self.status.value,
            "created_at": self.created_at,
            "order_id": _hex_or_none(self.order_id),
        })

    @classmethod
    def from_data(cls, data: Data) -> 'Escrow':
        r = "Escrow"
        d = _fields(data, r)
        return cls(
            escrow_id=_b32(d, "escrow_id", r),
            depositor_pubkey=_hex(d, "depositor_pubkey", r),
            recipient_pubkey=_hex(d, "recipient_pubkey", r),
            terms=_terms(d, r),
            held_app_id=_b32(d, "held_app_id", r),
            held_amount=_uint(d, "held_amount", r),
            release_hash=_optional(d, "release_hash", r, _b32),
            expiry_height=_uint(d, "expiry_height", r),
            status=_enum(d, "status", r, EscrowStatus),
            created_at=_optional(d, "created_at", r, _uint) or 0,
            order_id=_optional(d, "order_id", r, _b32),
        )


# =============================================================================
# Witness records
# =============================================================================

@dataclass(frozen=True)
class FillData:
    taker_pubkey: bytes
    fill_amount: int
    taker_dest_address: bytes

    def to_data(self) -> Data:
        return Data({
            "taker_pubkey": self.taker_pubkey.hex(),
            "fill_amount": self.fill_amount,
            "taker_dest_address": self.taker_dest_address.hex(),
        })

    @classmethod
    def from_data(cls, data: Data) -> 'FillData':
        r = "FillData"
        d = _fields(data, r)
        return cls(
            taker_pubkey=_hex(d, "taker_pubkey", r),
            fill_amount=_uint(d, "fill_amount", r),
            taker_dest_address=_hex(d, "taker_dest_address", r),
        )


@dataclass(frozen=True)
class ReleaseProof:
    """Witness for release and for dispute resolution."""
    preimage: bytes
    signature: bytes
    signer_pubkey: bytes

    def to_data(self) -> Data:
        return Data({
            "preimage": self.preimage.hex(),
            "signature": self.signature.hex(),
            "signer_pubkey": self.signer_pubkey.hex(),
        })

    @classmethod
    def from_data(cls, data: Data) -> 'ReleaseProof':
        r = "ReleaseProof"
        d = _fields(data, r)
        return cls(
            preimage=_hex(d, "preimage", r),
            signature=_hex(d, "signature", r),
            signer_pubkey=_hex(d, "signer_pubkey", r),
        )


@dataclass(frozen=True)
class RefundRequest:
    reason: str
    signature: bytes

    def to_data(self) -> Data:
        return Data({"reason": self.reason, "signature": self.signature.hex()})

    @classmethod
    def from_data(cls, data: Data) -> 'RefundRequest':
        r = "RefundRequest"
        d = _fields(data, r)
        return cls(reason=_str(d, "reason", r), signature=_hex(d, "signature", r))


@dataclass(frozen=True)
class DisputeData:
    reason: str
    evidence_hash: Optional[bytes]
    initiator_pubkey: bytes

    def to_data(self) -> Data:
        return Data({
            "reason": self.reason,
            "evidence_hash": _hex_or_none(self.evidence_hash),
            "initiator_pubkey": self.initiator_pubkey.hex(),
        })

    @classmethod
    def from_data(cls, data: Data) -> 'DisputeData':
        r = "DisputeData"
        d = _fields(data, r)
        return cls(
            reason=_str(d, "reason", r),
            evidence_hash=_optional(d, "evidence_hash", r, _b32),
            initiator_pubkey=_hex(d, "initiator_pubkey", r),
        )

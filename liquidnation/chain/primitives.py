"""
Core primitives: hashing, the charm payload codec, Transaction and charm
extraction.
"""

import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Tuple, Type, TypeVar

from ..errors import StructuralError
from .refs import App, UtxoId


# =============================================================================
# Hashing
# =============================================================================

def hash_bytes(data: bytes) -> bytes:
    """SHA-256 digest (32 bytes)."""
    return hashlib.sha256(data).digest()


def hash_str(data: str) -> bytes:
    """Digest of the UTF-8 encoding of a string (identity derivation)."""
    return hash_bytes(data.encode())


# =============================================================================
# Charm payloads
# =============================================================================

@dataclass(frozen=True)
class Data:
    """
    One charm payload, public input or witness.

    Holds a JSON-compatible value. The wire form is canonical JSON so that
    encoding is deterministic and decoding round-trips.
    """
    value: Any = None

    def to_bytes(self) -> bytes:
        if self.value is None:
            return b""
        canonical = json.dumps(self.value, sort_keys=True, separators=(',', ':'),
                               allow_nan=False)
        return canonical.encode()

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'Data':
        if not isinstance(raw, (bytes, bytearray)):
            raise StructuralError("expected bytes", got=type(raw).__name__)
        if not raw:
            return cls(None)
        try:
            return cls(json.loads(bytes(raw).decode()))
        except (UnicodeDecodeError, ValueError, RecursionError) as e:
            raise StructuralError("undecodable payload", reason=str(e)) from e

    @property
    def is_empty(self) -> bool:
        return self.value is None


Charms = Dict[App, Data]


# =============================================================================
# Transaction
# =============================================================================

@dataclass
class Transaction:
    """
    A proposed transaction as seen by the validator.

    ins: spent outputs in order, each with the charms it carried.
    outs: created outputs in order, each with the charms attached to it.
    """
    ins: List[Tuple[UtxoId, Charms]] = field(default_factory=list)
    outs: List[Charms] = field(default_factory=list)

    def input_charms(self) -> Iterator[Charms]:
        return (charms for _, charms in self.ins)

    def spends(self, utxo_id: UtxoId) -> bool:
        return any(spent == utxo_id for spent, _ in self.ins)

    def apps(self) -> List[App]:
        """Distinct apps present anywhere in the transaction, in first-seen order."""
        seen: Dict[App, None] = {}
        for charms in list(self.input_charms()) + list(self.outs):
            for app in charms:
                seen.setdefault(app, None)
        return list(seen)


# =============================================================================
# Charm extraction
# =============================================================================

T = TypeVar('T')


def charm_values(app: App, charms_seq: Iterable[Charms]) -> Iterator[Data]:
    """Payloads attached for exactly this app; other apps are skipped."""
    for charms in charms_seq:
        data = charms.get(app)
        if data is not None:
            yield data


def decode_charms(app: App, charms_seq: Iterable[Charms], record_type: Type[T]) -> List[T]:
    """
    Decode every payload of this app into `record_type`.

    A record of this app that does not decode rejects the whole operation.
    """
    return [record_type.from_data(data) for data in charm_values(app, charms_seq)]

"""
Application and UTXO references, and the lark parser for their text forms.

An App names one logical contract instance: a one-character tag, a 32-byte
identity and the 32-byte verification key of the contract binary. A UtxoId
names one spendable output. Both appear as strings in spells and witnesses
and are parsed with the grammar in refs.lark.
"""

from dataclasses import dataclass
from pathlib import Path

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from ..errors import StructuralError
from ..params import B32_LEN


GRAMMAR_PATH = Path(__file__).parent / "refs.lark"

VOUT_MAX = 2 ** 32 - 1


@dataclass(frozen=True)
class UtxoId:
    """A spendable output: transaction id plus output index."""
    txid: bytes
    vout: int

    def __post_init__(self):
        if len(self.txid) != B32_LEN:
            raise ValueError(f"txid must be {B32_LEN} bytes, got {len(self.txid)}")
        if not 0 <= self.vout <= VOUT_MAX:
            raise ValueError(f"vout out of range: {self.vout}")

    def __str__(self):
        return f"{self.txid.hex()}:{self.vout}"

    @classmethod
    def parse(cls, text: str) -> 'UtxoId':
        return parse_utxo_id(text)


@dataclass(frozen=True)
class App:
    """
    Application identity.

    Two charms belong to the same application only if tag, identity and vk
    all match.
    """
    tag: str
    identity: bytes
    vk: bytes

    def __post_init__(self):
        if len(self.tag) != 1:
            raise ValueError(f"tag must be a single character, got {self.tag!r}")
        if len(self.identity) != B32_LEN or len(self.vk) != B32_LEN:
            raise ValueError("identity and vk must be 32 bytes")

    def __str__(self):
        return f"{self.tag}/{self.identity.hex()}/{self.vk.hex()}"

    def with_tag(self, tag: str, identity: bytes) -> 'App':
        """Sibling app of the same contract binary (same vk)."""
        return App(tag=tag, identity=identity, vk=self.vk)

    @classmethod
    def parse(cls, text: str) -> 'App':
        return parse_app(text)


# =============================================================================
# Parser
# =============================================================================

@v_args(inline=True)
class RefTransformer(Transformer):
    """Transform Lark parse trees into App / UtxoId values."""

    def app_ref(self, tag, identity, vk):
        return App(tag=str(tag), identity=bytes.fromhex(identity), vk=bytes.fromhex(vk))

    def utxo_ref(self, txid, vout):
        return UtxoId(txid=bytes.fromhex(txid), vout=int(vout))


_parser = None


def get_parser() -> Lark:
    """Get or create the Lark parser instance."""
    global _parser
    if _parser is None:
        with open(GRAMMAR_PATH) as f:
            grammar = f.read()
        _parser = Lark(
            grammar,
            parser='lalr',
            start=['app_ref', 'utxo_ref'],
        )
    return _parser


def _parse(text, start: str):
    if not isinstance(text, str):
        raise StructuralError(f"expected {start} string", got=type(text).__name__)
    try:
        tree = get_parser().parse(text.strip(), start=start)
        return RefTransformer().transform(tree)
    except (LarkError, ValueError) as e:
        raise StructuralError(f"invalid {start}", text=text, reason=str(e)) from e


def parse_app(text: str) -> App:
    """Parse `tag/identity/vk`."""
    return _parse(text, 'app_ref')


def parse_utxo_id(text: str) -> UtxoId:
    """Parse `txid:vout`."""
    return _parse(text, 'utxo_ref')

"""
Load a spell (the YAML description of a charms transaction) into the
Transaction and per-app inputs the validator consumes.

Spell layout:

    version: 8
    apps:
      $ORDER: "n/<identity hex>/<vk hex>"
      $TOKEN: "t/<identity hex>/<vk hex>"
    public_inputs:          # optional, per app alias
      $ORDER: create
    private_inputs:         # optional, per app alias
      $ORDER: "<txid hex>:<vout>"
    ins:
      - utxo_id: "<txid hex>:<vout>"
        charms:
          $TOKEN: 1000
    outs:
      - address: "..."
        charms:
          $ORDER: {...}

Hex strings should be quoted so YAML keeps them as strings.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from ..chain.primitives import Charms, Data, Transaction
from ..chain.refs import App, parse_app, parse_utxo_id
from ..errors import StructuralError
from ..params import SPELL_VERSION

REQUIRED_FIELDS = ("apps", "ins", "outs")


class SpellError(ValueError):
    """Raised when a spell cannot be loaded."""


@dataclass
class Spell:
    version: int
    apps: Dict[str, App] = field(default_factory=dict)
    tx: Transaction = field(default_factory=Transaction)
    public_inputs: Dict[App, bytes] = field(default_factory=dict)
    private_inputs: Dict[App, bytes] = field(default_factory=dict)


def check_spell_structure(doc: Any):
    """Check the fields every spell must have."""
    if not isinstance(doc, dict):
        raise SpellError("Spell must be a mapping")
    if "version" not in doc:
        raise SpellError("Spell missing version field")
    version = doc["version"]
    if isinstance(version, bool) or version != SPELL_VERSION:
        raise SpellError(f"Invalid spell version: expected {SPELL_VERSION}, got {version}")
    for name in REQUIRED_FIELDS:
        if doc.get(name) is None:
            raise SpellError(f"Spell missing '{name}' field")


def _encode(value: Any, where: str) -> Data:
    data = Data(value)
    try:
        data.to_bytes()
    except (TypeError, ValueError) as e:
        raise SpellError(f"{where}: value is not serializable: {e}") from e
    return data


def _charms(entry: Any, apps: Dict[str, App], where: str) -> Charms:
    if not isinstance(entry, dict):
        raise SpellError(f"{where}: expected a mapping")
    raw = entry.get("charms") or {}
    if not isinstance(raw, dict):
        raise SpellError(f"{where}: charms must be a mapping")
    charms: Charms = {}
    for alias, value in raw.items():
        if alias not in apps:
            raise SpellError(f"{where}: unknown app {alias}")
        charms[apps[alias]] = _encode(value, f"{where} {alias}")
    return charms


def _inputs_by_app(doc: Dict[str, Any], key: str, apps: Dict[str, App]) -> Dict[App, bytes]:
    raw = doc.get(key) or {}
    if not isinstance(raw, dict):
        raise SpellError(f"'{key}' must be a mapping")
    out: Dict[App, bytes] = {}
    for alias, value in raw.items():
        if alias not in apps:
            raise SpellError(f"{key}: unknown app {alias}")
        out[apps[alias]] = _encode(value, f"{key} {alias}").to_bytes()
    return out


def spell_from_dict(doc: Any) -> Spell:
    check_spell_structure(doc)

    if not isinstance(doc["apps"], dict):
        raise SpellError("'apps' must be a mapping")
    try:
        apps = {alias: parse_app(ref) for alias, ref in doc["apps"].items()}
    except StructuralError as e:
        raise SpellError(f"Invalid app reference: {e}") from e

    if not isinstance(doc["ins"], list) or not isinstance(doc["outs"], list):
        raise SpellError("'ins' and 'outs' must be lists")

    tx = Transaction()
    for i, entry in enumerate(doc["ins"]):
        where = f"ins[{i}]"
        charms = _charms(entry, apps, where)
        try:
            utxo_id = parse_utxo_id(entry.get("utxo_id"))
        except StructuralError as e:
            raise SpellError(f"{where}: invalid utxo_id: {e}") from e
        tx.ins.append((utxo_id, charms))
    for i, entry in enumerate(doc["outs"]):
        tx.outs.append(_charms(entry, apps, f"outs[{i}]"))

    return Spell(
        version=doc["version"],
        apps=apps,
        tx=tx,
        public_inputs=_inputs_by_app(doc, "public_inputs", apps),
        private_inputs=_inputs_by_app(doc, "private_inputs", apps),
    )


def load_spell(text: str) -> Spell:
    """Parse spell YAML and build the transaction it describes."""
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SpellError(f"Failed to parse spell YAML: {e}") from e
    return spell_from_dict(doc)


def load_spell_file(path) -> Spell:
    with open(path) as f:
        return load_spell(f.read())

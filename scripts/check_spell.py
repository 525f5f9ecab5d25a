#!/usr/bin/env python3
"""
Check a spell against the Liquid Nation contracts.

Renders template variables, loads the spell and runs the contract for every
app in it, the way the host would before proving.

Usage:
    python check_spell.py SPELL.yaml --contract swap
    python check_spell.py spells/create-order.yaml --var app_id=... --var app_vk=...
    python check_spell.py SPELL.yaml --app-contract <vk hex>=escrow -v

Exit status: 0 accepted, 1 rejected, 2 spell could not be loaded.
"""

import argparse
import logging
import sys
from pathlib import Path

# Make the package importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

from liquidnation.apps import CONTRACTS, check_transaction, get_contract
from liquidnation.spell import SpellError, load_spell, render_template


def parse_assignments(pairs, what: str) -> dict:
    """Parse KEY=VALUE pairs."""
    out = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SpellError(f"Invalid {what} (expected KEY=VALUE): {pair}")
        out[key] = value
    return out


def contracts_by_vk(assignments: dict) -> dict:
    out = {}
    for vk_hex, name in assignments.items():
        try:
            vk = bytes.fromhex(vk_hex)
        except ValueError:
            raise SpellError(f"Invalid vk: {vk_hex}")
        out[vk] = get_contract(name)
    return out


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate every app in a spell against the Liquid Nation contracts"
    )
    parser.add_argument("spell", help="Spell YAML file (may be a template)")
    parser.add_argument(
        "--var",
        action="append",
        metavar="KEY=VALUE",
        help="Template variable (repeatable)",
    )
    parser.add_argument(
        "--contract",
        choices=sorted(CONTRACTS),
        default="swap",
        help="Contract for apps without an --app-contract entry (default: swap)",
    )
    parser.add_argument(
        "--app-contract",
        action="append",
        metavar="VK=NAME",
        help="Contract for apps with the given vk (repeatable)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show detailed output",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    spell_path = Path(args.spell)
    if not spell_path.exists():
        print(f"Error: File not found: {spell_path}", file=sys.stderr)
        return 2

    try:
        variables = parse_assignments(args.var, "--var")
        by_vk = contracts_by_vk(parse_assignments(args.app_contract, "--app-contract"))
        text = render_template(spell_path.read_text(), variables, strict=True)
        spell = load_spell(text)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    verdict = check_transaction(
        spell.tx,
        spell.public_inputs,
        spell.private_inputs,
        contracts_by_vk=by_vk,
        default=get_contract(args.contract),
    )

    for result in verdict.results:
        print(result)
        if args.verbose and not result.ok:
            print(f"  {result.violation.to_dict()}")

    if verdict.ok:
        print(f"Spell accepted ({len(verdict.results)} apps)")
        return 0
    print(f"Spell rejected ({len(verdict.rejected)} of {len(verdict.results)} apps)")
    return 1


if __name__ == "__main__":
    sys.exit(main())

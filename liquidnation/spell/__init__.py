"""
Spells: YAML descriptions of charms transactions.

This package provides:
- loader: structure checks and YAML -> Transaction loading
- template: `${name}` rendering and the order spell variable sets
"""

from .loader import (
    SpellError,
    Spell,
    check_spell_structure,
    spell_from_dict,
    load_spell,
    load_spell_file,
)

from .template import (
    missing_variables,
    render_template,
    OrderSpellData,
    FillSpellData,
    create_order_variables,
    fill_order_variables,
)

__all__ = [
    "SpellError",
    "Spell",
    "check_spell_structure",
    "spell_from_dict",
    "load_spell",
    "load_spell_file",
    "missing_variables",
    "render_template",
    "OrderSpellData",
    "FillSpellData",
    "create_order_variables",
    "fill_order_variables",
]

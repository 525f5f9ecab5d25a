"""
Tests for spell loading and the spell templates.
"""

from pathlib import Path

import pytest

from liquidnation.apps import check_transaction, get_contract
from liquidnation.chain import App, SwapOrder, hash_str
from liquidnation.spell import (
    FillSpellData, OrderSpellData, SpellError, check_spell_structure,
    create_order_variables, fill_order_variables, load_spell, load_spell_file,
    missing_variables, render_template,
)

from .builders import ASSET_A, ASSET_B, MAKER, TAKER, VK, utxo

SPELLS_DIR = Path(__file__).parents[2] / "spells"

MINIMAL = """
version: 8
apps:
  $TOKEN: "t/{asset}/{vk}"
public_inputs:
  $TOKEN: null
ins:
  - utxo_id: "{utxo}"
    charms:
      $TOKEN: 100
outs:
  - address: "bc1qexample"
    charms:
      $TOKEN: 60
  - charms:
      $TOKEN: 40
"""


def minimal_spell(**overrides) -> str:
    values = {"asset": ASSET_A.hex(), "vk": VK.hex(), "utxo": str(utxo("in"))}
    values.update(overrides)
    return MINIMAL.format(**values)


@pytest.fixture
def order_data():
    return OrderSpellData(
        maker_address="bc1qmaker",
        maker_pubkey=MAKER.hex(),
        offer_token_id=ASSET_A.hex(),
        offer_amount="1000",
        want_token_id=ASSET_B.hex(),
        want_amount="500",
        expiry_height=850000,
        allow_partial=False,
        funding_utxo=str(utxo("maker-funding")),
        escrow_address="bc1qescrow",
    )


# =============================================================================
# Structure
# =============================================================================

class TestSpellStructure:

    def test_valid(self):
        check_spell_structure({"version": 8, "apps": {}, "ins": [], "outs": []})

    def test_missing_version(self):
        with pytest.raises(SpellError, match="Spell missing version field"):
            check_spell_structure({"apps": {}, "ins": [], "outs": []})

    @pytest.mark.parametrize("version", [7, 9, "8", True])
    def test_wrong_version(self, version):
        with pytest.raises(SpellError, match="Invalid spell version: expected 8"):
            check_spell_structure({"version": version, "apps": {}, "ins": [], "outs": []})

    def test_missing_apps(self):
        with pytest.raises(SpellError, match="Spell missing 'apps' field"):
            check_spell_structure({"version": 8, "ins": [], "outs": []})

    def test_not_a_mapping(self):
        with pytest.raises(SpellError):
            check_spell_structure(["version", 8])


# =============================================================================
# Loading
# =============================================================================

class TestLoadSpell:

    def test_load(self):
        spell = load_spell(minimal_spell())
        token = App("t", ASSET_A, VK)
        assert spell.version == 8
        assert spell.apps == {"$TOKEN": token}
        assert spell.tx.ins[0][0] == utxo("in")
        assert [charms[token].value for charms in spell.tx.outs] == [60, 40]
        assert spell.public_inputs == {token: b""}
        assert spell.private_inputs == {}

    def test_invalid_yaml(self):
        with pytest.raises(SpellError, match="Failed to parse spell YAML"):
            load_spell("version: [8")

    def test_unknown_alias(self):
        text = minimal_spell().replace("      $TOKEN: 40", "      $OTHER: 40")
        with pytest.raises(SpellError, match="unknown app"):
            load_spell(text)

    def test_bad_utxo_id(self):
        with pytest.raises(SpellError, match="invalid utxo_id"):
            load_spell(minimal_spell(utxo="not-a-utxo"))

    def test_bad_app_reference(self):
        with pytest.raises(SpellError, match="Invalid app reference"):
            load_spell(minimal_spell(asset="abcd"))

    def test_spell_error_is_value_error(self):
        assert issubclass(SpellError, ValueError)

    def test_load_file(self, tmp_path):
        path = tmp_path / "spell.yaml"
        path.write_text(minimal_spell())
        assert len(load_spell_file(path).tx.outs) == 2


# =============================================================================
# Templates
# =============================================================================

class TestTemplates:

    def test_render(self):
        assert render_template("a: ${x}, b: ${y}", {"x": "1", "y": 2}) == "a: 1, b: 2"

    def test_missing_left_in_place(self):
        assert render_template("a: ${x}", {}) == "a: ${x}"

    def test_missing_variables(self):
        assert missing_variables("${b} ${a} ${b} ${c}", {"c": "1"}) == ["a", "b"]

    def test_strict(self):
        with pytest.raises(SpellError, match="Unresolved template variables: a"):
            render_template("${a}", {}, strict=True)

    def test_create_order_variables(self, order_data):
        variables = create_order_variables(order_data, app_id="aa", app_vk="bb")
        assert variables["in_utxo_0"] == order_data.funding_utxo
        assert variables["addr_escrow"] == "bc1qescrow"
        assert variables["allow_partial"] == "false"
        assert variables["expiry_height"] == "850000"

    def test_fill_amount_defaults_to_offer(self, order_data):
        fill = FillSpellData(
            order_utxo="o", taker_utxo="t", taker_pubkey="p", taker_address="ta",
            maker_address="ma", offer_amount="1000", want_amount="500",
        )
        variables = fill_order_variables(fill, order_data, app_id="aa", app_vk="bb")
        assert variables["fill_amount"] == "1000"
        assert "want_token_vk" not in variables
        assert variables["addr_maker"] == "ma"


# =============================================================================
# Bundled spells
# =============================================================================

class TestBundledSpells:

    def test_create_order(self, order_data):
        app_id = hash_str(order_data.funding_utxo).hex()
        template = (SPELLS_DIR / "create-order.yaml").read_text()
        text = render_template(template, create_order_variables(order_data, app_id, VK.hex()),
                               strict=True)
        spell = load_spell(text)

        verdict = check_transaction(spell.tx, spell.public_inputs, spell.private_inputs,
                                    default=get_contract("swap"))
        assert verdict.ok, str(verdict)
        assert len(verdict.results) == 2

    def test_tokens_share_order_vk(self, order_data):
        app_id = hash_str(order_data.funding_utxo).hex()
        template = (SPELLS_DIR / "create-order.yaml").read_text()
        spell = load_spell(render_template(
            template, create_order_variables(order_data, app_id, VK.hex()), strict=True))
        assert spell.apps["$OFFER"].vk == spell.apps["$ORDER"].vk == VK
        assert spell.apps["$OFFER"] == spell.apps["$ORDER"].with_tag("t", ASSET_A)

    def test_create_order_insufficient_funding(self, order_data):
        app_id = hash_str(order_data.funding_utxo).hex()
        template = (SPELLS_DIR / "create-order.yaml").read_text()
        variables = create_order_variables(order_data, app_id, VK.hex())
        # Order claims more than the funding UTXO can back
        text = render_template(template, variables, strict=True).replace(
            "offer_amount: 1000", "offer_amount: 5000")
        spell = load_spell(text)

        verdict = check_transaction(spell.tx, spell.public_inputs, spell.private_inputs,
                                    default=get_contract("swap"))
        assert not verdict.ok

    def test_fill_order(self, order_data):
        order_id = hash_str(order_data.funding_utxo)
        fill = FillSpellData(
            order_utxo=str(utxo("order")),
            taker_utxo=str(utxo("taker")),
            taker_pubkey=TAKER.hex(),
            taker_address="bc1qtaker",
            maker_address="bc1qmaker",
            offer_amount="1000",
            want_amount="500",
        )
        template = (SPELLS_DIR / "fill-order.yaml").read_text()
        text = render_template(
            template, fill_order_variables(fill, order_data, order_id.hex(), VK.hex()),
            strict=True,
        )
        spell = load_spell(text)

        order_app = App("n", order_id, VK)
        order = SwapOrder.from_data(spell.tx.ins[0][1][order_app])
        assert order.maker_pubkey == MAKER
        assert not order.allow_partial

        verdict = check_transaction(spell.tx, spell.public_inputs, spell.private_inputs,
                                    default=get_contract("swap"))
        assert verdict.ok, str(verdict)
        assert len(verdict.results) == 3

"""
Shared fixtures for the contract tests.
"""

import pytest

from liquidnation.apps import EscrowContract, SwapContract

from .builders import nft_for, utxo


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def swap():
    return SwapContract()


@pytest.fixture
def escrow():
    return EscrowContract()


@pytest.fixture
def funding():
    """UTXO an entity is created from."""
    return utxo("maker-funding")


@pytest.fixture
def order_app(funding):
    return nft_for(funding)


@pytest.fixture
def escrow_app():
    return nft_for(utxo("escrow-funding"))

"""
Protocol parameters shared by the swap and escrow applications.
"""

# =============================================================================
# Parameters
# =============================================================================

NFT = "n"  # Tag of the stateful entity charm (order or escrow)
TOKEN = "t"  # Tag of fungible token charms

B32_LEN = 32  # Length of identities, verification keys and digests (bytes)
U8_MAX = 2 ** 8 - 1
U64_MAX = 2 ** 64 - 1

SPELL_VERSION = 8  # Only spell version accepted by the loader

# SwapOrder.dest_chain values; a routing hint only, never checked
DEST_CHAIN_BITCOIN = 0
DEST_CHAIN_CARDANO = 1

"""
Liquid Nation - charm validators for a peer-to-peer swap order book and a
multi-party escrow.
"""

__version__ = "0.1.0"

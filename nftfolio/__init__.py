"""
Client data layer for the nftfolio portfolio / NFT showcase.
"""

from nftfolio.app import Portfolio

__all__ = ["Portfolio"]

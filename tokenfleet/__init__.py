"""
tokenfleet - Recurring Token Deployment Engine

Deploys freshly named ERC-20 token contracts from a fleet of test network
wallets, distributes part of the minted supply to a random sample of
recipients, and repeats on a fixed daily cycle.
"""

__version__ = "0.1.0"
__author__ = "tokenfleet Team"

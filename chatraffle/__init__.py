"""
Chat Raffle Relay Service
Keyword raffles over live TikTok chat, relayed to the operator's browser in real time
"""

__version__ = "0.1.0"

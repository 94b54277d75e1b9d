"""
Ingest layer: live chat sources

The TikTok implementation lives in chatraffle.ingest.tiktok and is imported
where a real connection is needed.
"""

from .interfaces import ChatSource, ChatSourceFactory

__all__ = ["ChatSource", "ChatSourceFactory"]

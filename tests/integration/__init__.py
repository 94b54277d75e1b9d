"""
Integration tests for the raffle service.

These exercise the FastAPI app and the Socket.IO handlers in-process with the
live source replaced by fakes; no network access is needed.
"""

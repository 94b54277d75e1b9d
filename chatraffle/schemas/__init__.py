"""Pydantic models for chat events, participants and operator commands."""

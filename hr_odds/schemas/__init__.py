"""Pydantic schemas for provider payloads."""

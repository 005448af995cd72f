"""Pydantic contracts for block documents."""

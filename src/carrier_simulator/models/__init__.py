"""Pydantic models for quotes, policies and carriers."""

"""Pydantic models for block configuration and the JSON API."""

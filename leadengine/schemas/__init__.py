"""Pydantic request/response and typed configuration models."""

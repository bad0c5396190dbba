"""Pydantic request/response models grouped by domain."""

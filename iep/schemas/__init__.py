"""Pydantic request and response schemas."""

from iep.schemas.common import APIResponse, CamelModel, PaginationMeta

__all__ = ["APIResponse", "CamelModel", "PaginationMeta"]

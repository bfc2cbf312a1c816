"""Catalog data models for the model menu.

- ModelReference: opaque pointer to one remote model asset
- ModelEntry: one selectable item in the model menu
- ModelCatalog: a named collection of entries from one data source
- FallbackObject: statically configured fallback item
"""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import Field


class ModelReference(BaseModel):
    """Reference to a remote model asset."""

    name: str = Field(description="Display name of the model")
    url: str = Field(default="", description="Location of the model asset")


class ModelEntry(BaseModel):
    """One displayable catalog item."""

    name: str = Field(description="Menu label")
    items: list[ModelReference] = Field(default_factory=list, description="Models loaded for this entry")
    center_on_load: bool = Field(default=False, description="Center the model when it is loaded")


class ModelCatalog(BaseModel):
    """Collection of model entries produced by a single data source."""

    name: str = Field(default="", description="Label of the source that produced the catalog")
    entries: list[ModelEntry] | None = Field(default=None, description="Entries, None when nothing was read")


class FallbackObject(BaseModel):
    """Statically supplied fallback item."""

    model: ModelReference


def is_empty(catalog: ModelCatalog | None) -> bool:
    """Return True if the catalog is absent or carries no entries."""
    return catalog is None or catalog.entries is None or len(catalog.entries) == 0


def catalog_from_fallback(objects: list[FallbackObject] | None) -> ModelCatalog:
    """Synthesize a catalog with one centered entry per fallback object."""
    catalog = ModelCatalog(name="fallback-data")
    if objects is None:
        return catalog

    catalog.entries = [
        ModelEntry(name=obj.model.name, items=[obj.model], center_on_load=True) for obj in objects
    ]
    return catalog

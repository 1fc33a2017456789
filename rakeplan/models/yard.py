"""Yard data model for stockyard supply locations."""

from typing import Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator


class Yard(BaseModel):
    """
    Represents a stockyard holding per-product inventory.

    The yard itself is never mutated during planning. Inventory and loading
    hours consumed by a run are tracked by the ConstraintTracker.

    Attributes:
        id: Unique yard identifier
        name: Human-readable name
        lat: Latitude in degrees
        lng: Longitude in degrees
        inventory: Tons on hand per product
        loading_rate_tph: Loading throughput in tons per hour
    """
    id: str = Field(..., description="Unique yard identifier")
    name: str = Field(default="", description="Yard name")
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)
    inventory: Dict[str, float] = Field(
        default_factory=dict,
        description="Tons available per product"
    )
    loading_rate_tph: float = Field(
        ...,
        description="Loading rate (tons/hour); floored when planning"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator('inventory')
    @classmethod
    def inventory_must_be_non_negative(cls, v):
        """Reject negative stock levels."""
        for product, tons in v.items():
            if tons < 0:
                raise ValueError(f"inventory for {product!r} must be >= 0, got {tons}")
        return v

    def available(self, product: str) -> float:
        """Original inventory for a product (0 if not stocked)."""
        return self.inventory.get(product, 0.0)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name or self.id} ({self.id}) @ {self.loading_rate_tph:,.0f} tph"

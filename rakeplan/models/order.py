"""Customer and order data models."""

from pydantic import BaseModel, ConfigDict, Field


class Customer(BaseModel):
    """
    Represents a customer delivery point.

    Attributes:
        id: Unique customer identifier
        name: Customer name
        lat: Latitude in degrees
        lng: Longitude in degrees
    """
    id: str = Field(..., description="Unique customer identifier")
    name: str = Field(default="", description="Customer name")
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)

    model_config = ConfigDict(frozen=True)


class Order(BaseModel):
    """
    A demand line item: tons of one product for one customer by a due hour.

    Attributes:
        id: Unique order identifier
        customer_id: Customer receiving the order
        product: Product identifier
        tons: Requested tons
        due_hour: Due time in hours from the start of the horizon
        priority: Schedule sensitivity (1 = normal, larger = more sensitive)
    """
    id: str = Field(..., description="Unique order identifier")
    customer_id: str = Field(..., description="Customer ID")
    product: str = Field(..., description="Product ID")
    tons: float = Field(..., description="Requested tons", gt=0)
    due_hour: float = Field(..., description="Due hour from horizon start", ge=0)
    priority: int = Field(default=1, description="Priority weight for tardiness", ge=1)

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        """String representation."""
        return f"Order {self.id}: {self.tons:,.0f}t {self.product} -> {self.customer_id} by h{self.due_hour:g}"

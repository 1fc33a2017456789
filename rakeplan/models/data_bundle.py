"""Planning input bundle: yards, customers, orders, rakes and products."""

from typing import Dict, List
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .order import Customer, Order
from .rake import Rake
from .yard import Yard


class DataBundle(BaseModel):
    """
    Complete input for one allocation run.

    Referential integrity is checked at construction: ids are unique within
    each collection, every order points at a known customer, and every order's
    product appears in ``products``.

    Attributes:
        yards: Supply yards
        customers: Delivery points referenced by orders
        orders: Demand line items
        rakes: Transport fleet
        products: Product identifiers
    """
    yards: List[Yard] = Field(default_factory=list, description="Supply yards")
    customers: List[Customer] = Field(default_factory=list, description="Customers")
    orders: List[Order] = Field(default_factory=list, description="Orders to allocate")
    rakes: List[Rake] = Field(default_factory=list, description="Rake fleet")
    products: List[str] = Field(default_factory=list, description="Product identifiers")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def validate_references(self):
        """Check id uniqueness and order references."""
        for name, items in (
            ('yards', [y.id for y in self.yards]),
            ('customers', [c.id for c in self.customers]),
            ('orders', [o.id for o in self.orders]),
            ('rakes', [r.id for r in self.rakes]),
            ('products', list(self.products)),
        ):
            duplicates = sorted({i for i in items if items.count(i) > 1})
            if duplicates:
                raise ValueError(f"duplicate ids in {name}: {duplicates}")

        customer_ids = {c.id for c in self.customers}
        products = set(self.products)
        for order in self.orders:
            if order.customer_id not in customer_ids:
                raise ValueError(
                    f"order {order.id} references unknown customer {order.customer_id!r}"
                )
            if order.product not in products:
                raise ValueError(
                    f"order {order.id} references unknown product {order.product!r}"
                )
        return self

    @property
    def customers_by_id(self) -> Dict[str, Customer]:
        return {c.id: c for c in self.customers}

    @property
    def orders_by_id(self) -> Dict[str, Order]:
        return {o.id: o for o in self.orders}

    def customer(self, customer_id: str) -> Customer:
        """Look up a customer by id (KeyError if unknown)."""
        return self.customers_by_id[customer_id]

    def order(self, order_id: str) -> Order:
        """Look up an order by id (KeyError if unknown)."""
        return self.orders_by_id[order_id]

    @property
    def total_demand_tons(self) -> float:
        """Sum of requested tons over all orders."""
        return sum(o.tons for o in self.orders)

    @property
    def fleet_capacity_tons(self) -> float:
        """Sum of wagons x capacity per wagon over the whole fleet."""
        return sum(r.capacity_tons for r in self.rakes)

    def summary(self) -> str:
        """One-line summary for logs."""
        return (
            f"{len(self.orders)} orders ({self.total_demand_tons:,.0f}t), "
            f"{len(self.yards)} yards, {len(self.rakes)} rakes "
            f"({self.fleet_capacity_tons:,.0f}t fleet capacity), "
            f"{len(self.products)} products"
        )

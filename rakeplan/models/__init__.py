"""Data models for the rake allocation planner."""

from .yard import Yard
from .rake import Rake
from .order import Customer, Order
from .data_bundle import DataBundle
from .parameters import OptimizationParams

__all__ = [
    # Supply and fleet
    "Yard",
    "Rake",
    # Demand
    "Customer",
    "Order",
    # Run input
    "DataBundle",
    "OptimizationParams",
]

"""Pydantic schemas for allocation results.

This module defines the interface contract between the allocation backends
and their consumers (presentation, export). Both the greedy heuristic and the
LP backend MUST return an OptimizationResult conforming to these schemas.

Design Principles:
1. Fail Fast: Invalid data raises ValidationError at the backend boundary
2. Single Source of Truth: This schema IS the output contract
3. Same Shape for Both Backends: consumers never branch on the backend
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional, Any, TYPE_CHECKING
import pandas as pd
from pydantic import BaseModel, Field, ConfigDict, model_validator

if TYPE_CHECKING:
    from rakeplan.models import DataBundle


class Backend(str, Enum):
    """Allocation backend that produced a result."""
    GREEDY = "greedy"
    LP = "lp"


# ============================================================================
# Core Data Structures
# ============================================================================

class AssignmentResult(BaseModel):
    """Committed allocation of tons along one (order, yard, rake) triple.

    Immutable once created; results hold assignments in allocation order.
    """
    order_id: str = Field(..., description="Order ID")
    yard_id: str = Field(..., description="Supplying yard ID")
    rake_id: str = Field(..., description="Carrying rake ID")
    tons: float = Field(..., gt=0, description="Tons allocated")
    distance_km: float = Field(..., ge=1, description="Planning distance (km)")
    eta_hour: float = Field(..., ge=0, description="Arrival hour (loading + travel)")
    cost: float = Field(..., description="Monetary cost of this assignment")

    model_config = ConfigDict(frozen=True)


class PlanMetrics(BaseModel):
    """Summary KPIs for a set of assignments.

    All percentages are 0 when their denominator is 0.
    """
    total_tons: float = Field(default=0.0, ge=0, description="Sum of allocated tons")
    total_cost: float = Field(default=0.0, description="Sum of assignment costs")
    avg_eta: float = Field(default=0.0, ge=0, description="Tons-weighted average ETA (hours)")
    on_time_pct: float = Field(default=0.0, ge=0, le=100, description="Tons arriving by due hour (%)")
    rake_utilization_pct: float = Field(default=0.0, ge=0, description="Allocated tons / fleet capacity (%)")

    model_config = ConfigDict(frozen=True)


class SolverInfo(BaseModel):
    """Solver diagnostics attached to LP results."""
    solver_name: Optional[str] = Field(None, description="Solver used")
    termination_condition: Optional[str] = Field(None, description="Solver termination condition")
    solve_time_seconds: Optional[float] = Field(None, ge=0, description="Wall-clock solve time")
    num_variables: int = Field(default=0, ge=0, description="Decision variables")
    num_constraints: int = Field(default=0, ge=0, description="Constraints")

    model_config = ConfigDict(extra="allow")


# ============================================================================
# Top-Level Result Schema
# ============================================================================

class OptimizationResult(BaseModel):
    """Top-level allocation result.

    This is the PRIMARY interface contract between backends and consumers.

    Required Fields:
        - backend: Which backend produced the assignments
        - assignments: Allocations in allocation order
        - objective: Backend objective value
        - metrics: Aggregate KPIs
        - messages: Human-readable diagnostics (one per under-filled order)

    Optional Fields:
        - solver: Solver diagnostics (LP backend)
        - fallback_from: Backend that failed before this result was produced
    """

    backend: Backend = Field(..., description="Backend that produced the assignments")
    assignments: List[AssignmentResult] = Field(default_factory=list, description="Allocations")
    objective: float = Field(default=0.0, description="Objective value")
    metrics: PlanMetrics = Field(default_factory=PlanMetrics, description="Aggregate KPIs")
    messages: List[str] = Field(default_factory=list, description="Diagnostics")

    solver: Optional[SolverInfo] = Field(None, description="Solver diagnostics (LP only)")
    fallback_from: Optional[Backend] = Field(
        None,
        description="Set when the caller fell back from a failed backend"
    )

    model_config = ConfigDict(validate_assignment=True)

    @model_validator(mode='after')
    def validate_consistency(self):
        """Cross-field consistency validation."""
        tons = sum(a.tons for a in self.assignments)
        if abs(self.metrics.total_tons - tons) > 1e-6 * max(tons, 1):
            raise ValueError(
                f"metrics.total_tons ({self.metrics.total_tons:.2f}) != sum of assignment tons ({tons:.2f})"
            )
        return self

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def tons_by_order(self) -> Dict[str, float]:
        """Allocated tons per order id."""
        totals: Dict[str, float] = {}
        for a in self.assignments:
            totals[a.order_id] = totals.get(a.order_id, 0.0) + a.tons
        return totals

    def to_dataframe(self, data: Optional['DataBundle'] = None) -> pd.DataFrame:
        """Plan view with one row per assignment.

        Args:
            data: When given, order attributes (customer, product, priority,
                due hour) are joined onto each row.

        Returns:
            DataFrame in allocation order
        """
        columns = ['order_id', 'yard_id', 'rake_id', 'tons', 'distance_km', 'eta_hour', 'cost']
        df = pd.DataFrame([a.model_dump() for a in self.assignments], columns=columns)

        if data is not None:
            orders = pd.DataFrame(
                [
                    {
                        'order_id': o.id,
                        'customer_id': o.customer_id,
                        'product': o.product,
                        'priority': o.priority,
                        'due_hour': o.due_hour,
                    }
                    for o in data.orders
                ],
                columns=['order_id', 'customer_id', 'product', 'priority', 'due_hour'],
            )
            df = df.merge(orders, on='order_id', how='left')
            df['late'] = df['eta_hour'] > df['due_hour']

        return df

    def to_dict_json_safe(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict."""
        return self.model_dump(mode='json')

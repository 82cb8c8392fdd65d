"""
Wire models for problem definitions and solution documents.

A problem is a list of raw orders as produced by the challenge server:

    {"id": "a8cfcb76", "name": "Cheese Pizza", "temp": "hot", "price": 11, "freshness": 300}

Orders are converted into kitchen orders before they reach the engine, and
the engine's action log is written back out as a solution document.
"""

from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from pydantic import BaseModel, Field, ValidationError

from kitchen.actions import ActionRecord
from kitchen.exceptions import InvalidOrder
from kitchen.order import Order
from kitchen_types import Temperature

logger = logging.getLogger(__name__)


class ProblemOrder(BaseModel):
    """An order as it appears in a problem definition."""
    id: str = Field(..., min_length=1, description="Unique order id")
    name: str = Field(default="", description="Dish name")
    temp: str = Field(..., description="Ideal temperature: hot, cold or room")
    price: Decimal = Field(default=Decimal("0"), ge=0, description="Order price")
    freshness: int = Field(..., ge=0, description="Shelf life in seconds")

    def to_domain(self) -> Order:
        """Build the kitchen order; placement time is stamped by the engine."""
        try:
            temperature = Temperature.from_value(self.temp)
        except ValueError as e:
            raise InvalidOrder(f"Order {self.id}: {e}") from e

        return Order(
            id=self.id,
            name=self.name,
            temperature=temperature,
            price=self.price,
            shelf_life_seconds=self.freshness,
        )

    @classmethod
    def parse(cls, data: Dict[str, Any]) -> "ProblemOrder":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidOrder(f"Invalid order {data.get('id', '<no id>')!r}: {e}") from e


class Problem(BaseModel):
    """A set of orders to run through the kitchen."""
    test_id: str = Field(default="local", description="Problem identifier")
    orders: List[ProblemOrder] = Field(default_factory=list)

    def to_domain(self) -> List[Order]:
        return [order.to_domain() for order in self.orders]

    @classmethod
    def from_data(cls, data: Union[Dict[str, Any], List[Dict[str, Any]]]) -> "Problem":
        """Accept either ``{"test_id": ..., "orders": [...]}`` or a bare order list."""
        if isinstance(data, list):
            data = {"orders": data}
        test_id = str(data.get("test_id") or data.get("testId") or "local")
        orders = [ProblemOrder.parse(item) for item in data.get("orders", [])]
        return cls(test_id=test_id, orders=orders)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Problem":
        path = Path(path)
        with open(path) as f:
            data = json.load(f)
        problem = cls.from_data(data)
        logger.info(f"Loaded problem {problem.test_id} with {len(problem.orders)} orders from {path}")
        return problem


class ActionPayload(BaseModel):
    """One action as submitted in a solution."""
    timestamp: int = Field(..., description="Microseconds since the Unix epoch")
    id: str
    action: str
    target: str
    reason: Optional[str] = None

    @classmethod
    def from_record(cls, record: ActionRecord) -> "ActionPayload":
        return cls(**record.to_dict())


class SolutionOptions(BaseModel):
    rate: int = Field(..., description="Placement interval in microseconds")
    min: int = Field(..., description="Minimum pickup delay in microseconds")
    max: int = Field(..., description="Maximum pickup delay in microseconds")


class Solution(BaseModel):
    """Result document for a simulated problem."""
    test_id: str
    options: SolutionOptions
    actions: List[ActionPayload] = Field(default_factory=list)

    @classmethod
    def from_run(
        cls,
        test_id: str,
        actions: List[ActionRecord],
        rate_ms: int,
        pickup_min_s: float,
        pickup_max_s: float,
    ) -> "Solution":
        options = SolutionOptions(
            rate=int(rate_ms * 1_000),
            min=int(pickup_min_s * 1_000_000),
            max=int(pickup_max_s * 1_000_000),
        )
        return cls(
            test_id=test_id,
            options=options,
            actions=[ActionPayload.from_record(record) for record in actions],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "options": self.options.model_dump(),
            "actions": [action.model_dump(exclude_none=True) for action in self.actions],
        }

    def write(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Wrote solution for {self.test_id} ({len(self.actions)} actions) to {path}")
        return path

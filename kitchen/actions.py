"""
Records of what the kitchen did with each order.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from kitchen_types import ActionKind, StorageLocation

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_micros(timestamp: datetime) -> int:
    """Microseconds since the Unix epoch; naive datetimes are taken as UTC."""
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    delta = timestamp - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds


@dataclass(frozen=True)
class ActionRecord:
    """One entry of the kitchen action log."""
    timestamp: datetime
    order_id: str
    action: ActionKind
    target: StorageLocation
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire form consumed by the result submission."""
        data: Dict[str, Any] = {
            "timestamp": to_epoch_micros(self.timestamp),
            "id": self.order_id,
            "action": self.action.value,
            "target": self.target.value,
        }
        if self.reason is not None:
            data["reason"] = self.reason
        return data

    def __str__(self) -> str:
        text = f"[{self.timestamp.isoformat()}] {self.action.value.upper()} {self.order_id} {self.target.value}"
        if self.reason:
            text += f" ({self.reason})"
        return text

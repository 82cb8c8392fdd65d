"""
Type definitions for the kitchen storage simulation
"""
from enum import Enum


class Temperature(Enum):
    """Temperature an order should be held at"""
    HOT = "hot"
    COLD = "cold"
    ROOM = "room"

    @classmethod
    def from_value(cls, value: str) -> "Temperature":
        try:
            return cls(value.strip().lower())
        except (AttributeError, ValueError):
            raise ValueError(f"Unknown temperature {value!r}") from None


class StorageLocation(Enum):
    """Storage areas an order can sit in"""
    HEATER = "heater"
    COOLER = "cooler"
    SHELF = "shelf"


class ActionKind(Enum):
    """Kinds of actions recorded in the kitchen log"""
    PLACE = "place"
    MOVE = "move"
    PICKUP = "pickup"
    DISCARD = "discard"


IDEAL_LOCATION = {
    Temperature.HOT: StorageLocation.HEATER,
    Temperature.COLD: StorageLocation.COOLER,
    Temperature.ROOM: StorageLocation.SHELF,
}

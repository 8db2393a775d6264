from enum import Enum
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, field_validator

# Sentinel for an absent optional reference (pre/next way, speed limits)
NO_REFERENCE = 0

# SQLite stores signed 64-bit integers
MAX_ID = 2**63 - 1
U8_MAX = 255

SPEED_LIMIT_COUNT = 13
SPEED_LIMIT_BASE = 30
SPEED_LIMIT_STEP = 10


class Way(BaseModel):
    """
    A directed road segment with links to its neighbours and a speed range.

    Optional references hold NO_REFERENCE (0) when absent; None is accepted
    on input and normalized to 0.
    """
    way_id: int = Field(ge=0, le=MAX_ID)
    pre_way_id: int = Field(default=NO_REFERENCE, ge=0, le=MAX_ID)
    next_way_id: int = Field(default=NO_REFERENCE, ge=0, le=MAX_ID)
    speed_min: int = Field(default=NO_REFERENCE, ge=0, le=U8_MAX)
    speed_max: int = Field(default=NO_REFERENCE, ge=0, le=U8_MAX)

    @field_validator("pre_way_id", "next_way_id", "speed_min", "speed_max", mode="before")
    @classmethod
    def _none_is_absent(cls, value):
        return NO_REFERENCE if value is None else value


class SpeedLimit(BaseModel):
    """
    Row of the static speed_limit reference table.
    """
    id: int = Field(ge=1, le=SPEED_LIMIT_COUNT)
    speed: int


def default_speed_limits() -> List[SpeedLimit]:
    """The 13 seeded speed limits: 30, 40, ... 150."""
    return [
        SpeedLimit(id=i, speed=SPEED_LIMIT_BASE + SPEED_LIMIT_STEP * (i - 1))
        for i in range(1, SPEED_LIMIT_COUNT + 1)
    ]


class Node(BaseModel):
    node_index: int = Field(ge=0, le=MAX_ID)
    data_line_number: int = Field(ge=0, le=MAX_ID)
    node_value: str


class WayNodes(BaseModel):
    """
    Ordered node sequence of one way. Replaced wholesale on update.
    """
    way_id: int = Field(ge=0, le=MAX_ID)
    nodes: List[Node] = Field(default_factory=list)


class WayData(BaseModel):
    """
    Raw ingestion blob of a way plus where its navigation rows live.
    """
    way_id: int = Field(ge=0, le=MAX_ID)
    raw_data: bytes = b""
    navi_number: int = Field(default=0, ge=0, le=U8_MAX)  # Count of derived navigation entries
    navi_table_id: int = Field(default=0, ge=0, le=MAX_ID)  # Partition holding the navigation rows


class NaviData(BaseModel):
    navi_index: int = Field(ge=0, le=U8_MAX)
    data: bytes = b""


class NaviInfo(BaseModel):
    """
    Ordered navigation entries derived for one way.
    """
    way_id: int = Field(ge=0, le=MAX_ID)
    navi_data: List[NaviData] = Field(default_factory=list)


class LookupStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


T = TypeVar("T")


class LookupResult(BaseModel, Generic[T]):
    """
    Outcome of a lookup: found (with record), not found, or a statement error.

    Truthiness follows `found`, so `if store.query_way(7):` reads naturally.
    """
    status: LookupStatus
    record: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def from_record(cls, record) -> "LookupResult":
        return cls(status=LookupStatus.FOUND, record=record)

    @classmethod
    def missing(cls) -> "LookupResult":
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def from_error(cls, error: Exception) -> "LookupResult":
        return cls(status=LookupStatus.ERROR, error=str(error))

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_error(self) -> bool:
        return self.status is LookupStatus.ERROR

    def __bool__(self) -> bool:
        return self.found

"""
Data models for publish prediction aggregation.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..db.database import PredictionItem, PublishPrediction

DAY_NAMES = [
    "Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday",
]


@dataclass(frozen=True)
class Weekstamp:
    """A (day-of-week, hour-of-day) slot in the weekly programming grid."""
    day_of_week: int
    hour_of_day: int

    @classmethod
    def from_item(cls, item: PredictionItem) -> "Weekstamp":
        return cls(day_of_week=item.day_of_week, hour_of_day=item.hour_of_day)

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week % 7]


@dataclass
class ChannelSummary:
    """A channel as shown in the programming grid."""
    channel_id: str
    title: str


@dataclass
class ProgrammingGridEntry:
    """All channels whose strongest predicted slot is the same weekstamp."""
    weekstamp: Weekstamp
    channels: list[ChannelSummary] = field(default_factory=list)


# Import file payloads


class PredictionItemPayload(BaseModel):
    day_of_week: int = Field(ge=0, le=6)
    hour_of_day: int = Field(ge=0, le=23)
    deviation_from_average: float


class PublishPredictionPayload(BaseModel):
    """A pre-computed publish prediction as found in an import file."""
    channel_id: str
    title: str = ""
    gradient: float
    prediction_items: list[PredictionItemPayload] = Field(default_factory=list)
    predicted_at: Optional[datetime] = None

    def to_prediction(self) -> PublishPrediction:
        return PublishPrediction(
            channel_id=self.channel_id,
            title=self.title,
            gradient=self.gradient,
            prediction_items=[
                PredictionItem(
                    day_of_week=item.day_of_week,
                    hour_of_day=item.hour_of_day,
                    deviation_from_average=item.deviation_from_average,
                )
                for item in self.prediction_items
            ],
            predicted_at=self.predicted_at,
        )

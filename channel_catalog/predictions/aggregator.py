"""
Publish prediction views.

Reads pre-computed per-channel publish predictions and shapes them into a
single-channel view or a weekly programming grid.

Note the gradient bounds differ: the single-channel view requires the
gradient to exceed min_gradient, the grid accepts gradients equal to it.
"""
import logging
from typing import Iterable, List, Optional

from ..db.database import Database, PredictionItem, PublishPrediction
from .models import ChannelSummary, ProgrammingGridEntry, Weekstamp

logger = logging.getLogger(__name__)

DEFAULT_MIN_GRADIENT = 0.7


def get_single_channel_prediction(
    db: Database,
    channel_id: str,
    min_gradient: float = DEFAULT_MIN_GRADIENT,
    filter_below_average: bool = False,
) -> Optional[List[PredictionItem]]:
    """
    Get the predicted publish slots for one channel.

    Args:
        db: Database holding publish predictions.
        channel_id: Channel to look up.
        min_gradient: Predictions with gradient <= this are discarded.
        filter_below_average: Drop slots with deviation_from_average <= 0.

    Returns:
        Prediction items strongest first, or None if there is no
        prediction of sufficient quality.
    """
    prediction = db.get_publish_prediction(channel_id)

    if prediction is None or prediction.gradient <= min_gradient:
        return None

    items = prediction.prediction_items
    if filter_below_average:
        items = [item for item in items if item.deviation_from_average > 0]

    return items


def build_programming_grid(
    predictions: Iterable[PublishPrediction],
    min_gradient: float = DEFAULT_MIN_GRADIENT,
) -> List[ProgrammingGridEntry]:
    """Group channels by the weekstamp of their top-ranked prediction item.

    Each channel lands in at most one slot. Predictions with a gradient
    below min_gradient or without items are skipped.
    """
    grid: dict[Weekstamp, ProgrammingGridEntry] = {}

    for prediction in predictions:
        if prediction.gradient < min_gradient:
            continue
        if not prediction.prediction_items:
            continue

        weekstamp = Weekstamp.from_item(prediction.prediction_items[0])
        entry = grid.setdefault(weekstamp, ProgrammingGridEntry(weekstamp=weekstamp))
        entry.channels.append(
            ChannelSummary(channel_id=prediction.channel_id, title=prediction.title)
        )

    return list(grid.values())


def get_weekly_programming_grid(
    db: Database,
    min_gradient: float = DEFAULT_MIN_GRADIENT,
) -> List[ProgrammingGridEntry]:
    """Build the weekly programming grid from all stored predictions."""
    predictions = db.get_publish_predictions()
    grid = build_programming_grid(predictions, min_gradient)
    logger.info(
        "Programming grid: %d slots from %d predictions (min_gradient=%.2f)",
        len(grid),
        len(predictions),
        min_gradient,
    )
    return grid

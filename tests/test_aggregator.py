"""
Tests for publish prediction aggregation.
"""
import pytest

from channel_catalog.db.database import PredictionItem, PublishPrediction
from channel_catalog.predictions.aggregator import (
    DEFAULT_MIN_GRADIENT,
    build_programming_grid,
    get_single_channel_prediction,
    get_weekly_programming_grid,
)
from channel_catalog.predictions.models import (
    PublishPredictionPayload,
    Weekstamp,
)


def _prediction(channel_id, gradient, items):
    return PublishPrediction(
        channel_id=channel_id,
        title=f"Title {channel_id}",
        gradient=gradient,
        prediction_items=[PredictionItem(*item) for item in items],
    )


class TestSingleChannelPrediction:
    def test_missing_channel(self, db):
        assert get_single_channel_prediction(db, "UC_missing") is None

    def test_gradient_bound_is_exclusive(self, db):
        db.save_publish_prediction(_prediction("UC_equal", 0.7, [(1, 10, 0.5)]))
        db.save_publish_prediction(_prediction("UC_above", 0.71, [(1, 10, 0.5)]))

        assert get_single_channel_prediction(db, "UC_equal", min_gradient=0.7) is None
        assert get_single_channel_prediction(db, "UC_above", min_gradient=0.7) == [
            PredictionItem(1, 10, 0.5)
        ]

    def test_default_min_gradient(self, db):
        db.save_publish_prediction(_prediction("UC_a", DEFAULT_MIN_GRADIENT, [(1, 10, 0.5)]))
        assert get_single_channel_prediction(db, "UC_a") is None

    def test_returns_all_items_in_order(self, db):
        db.save_publish_prediction(_prediction("UC_a", 0.9, [(2, 18, 0.6), (4, 8, -0.2), (6, 12, 0.1)]))

        items = get_single_channel_prediction(db, "UC_a")
        assert [(i.day_of_week, i.hour_of_day) for i in items] == [(2, 18), (4, 8), (6, 12)]

    def test_filter_below_average(self, db):
        db.save_publish_prediction(_prediction(
            "UC_a", 0.9,
            [(2, 18, 0.6), (4, 8, -0.2), (5, 9, 0.0), (6, 12, 0.1)],
        ))

        items = get_single_channel_prediction(db, "UC_a", filter_below_average=True)
        assert [(i.day_of_week, i.hour_of_day) for i in items] == [(2, 18), (6, 12)]
        assert all(i.deviation_from_average > 0 for i in items)

    def test_filter_can_leave_empty_list(self, db):
        db.save_publish_prediction(_prediction("UC_a", 0.9, [(4, 8, -0.2)]))

        assert get_single_channel_prediction(db, "UC_a", filter_below_average=True) == []


class TestBuildProgrammingGrid:
    def test_gradient_bound_is_inclusive(self):
        predictions = [
            _prediction("UC_low", 0.5, [(1, 10, 0.3)]),
            _prediction("UC_equal", 0.7, [(2, 11, 0.3)]),
            _prediction("UC_high", 0.9, [(3, 12, 0.3)]),
        ]

        grid = build_programming_grid(predictions, min_gradient=0.7)

        channel_ids = [ch.channel_id for entry in grid for ch in entry.channels]
        assert sorted(channel_ids) == ["UC_equal", "UC_high"]

    def test_groups_channels_sharing_top_slot(self):
        predictions = [
            _prediction("UC_a", 0.8, [(5, 17, 0.4), (1, 9, 0.2)]),
            _prediction("UC_b", 0.9, [(5, 17, 0.3)]),
            _prediction("UC_c", 0.8, [(0, 12, 0.5)]),
        ]

        grid = build_programming_grid(predictions)
        by_slot = {entry.weekstamp: entry for entry in grid}

        assert len(grid) == 2
        friday = by_slot[Weekstamp(5, 17)]
        assert [ch.channel_id for ch in friday.channels] == ["UC_a", "UC_b"]
        assert friday.channels[0].title == "Title UC_a"
        assert [ch.channel_id for ch in by_slot[Weekstamp(0, 12)].channels] == ["UC_c"]

    def test_only_top_item_used(self):
        predictions = [_prediction("UC_a", 0.8, [(5, 17, 0.4), (1, 9, 0.2), (2, 3, 0.1)])]

        grid = build_programming_grid(predictions)

        assert [entry.weekstamp for entry in grid] == [Weekstamp(5, 17)]

    def test_each_channel_appears_once(self):
        predictions = [
            _prediction("UC_a", 0.8, [(1, 1, 0.4), (2, 2, 0.3)]),
            _prediction("UC_b", 0.8, [(2, 2, 0.4), (1, 1, 0.3)]),
        ]

        grid = build_programming_grid(predictions)

        channel_ids = [ch.channel_id for entry in grid for ch in entry.channels]
        assert sorted(channel_ids) == ["UC_a", "UC_b"]

    def test_skips_empty_item_lists(self):
        predictions = [
            _prediction("UC_empty", 0.95, []),
            _prediction("UC_a", 0.8, [(3, 20, 0.1)]),
        ]

        grid = build_programming_grid(predictions)

        assert len(grid) == 1
        assert grid[0].channels[0].channel_id == "UC_a"

    def test_empty_input(self):
        assert build_programming_grid([]) == []


class TestWeeklyProgrammingGrid:
    def test_reads_from_database(self, db):
        db.save_publish_prediction(_prediction("UC_a", 0.5, [(1, 10, 0.3)]))
        db.save_publish_prediction(_prediction("UC_b", 0.7, [(2, 20, 0.3)]))
        db.save_publish_prediction(_prediction("UC_c", 0.9, [(2, 20, 0.1)]))

        grid = get_weekly_programming_grid(db, min_gradient=0.7)

        assert len(grid) == 1
        assert grid[0].weekstamp == Weekstamp(2, 20)
        assert [ch.channel_id for ch in grid[0].channels] == ["UC_b", "UC_c"]


class TestWeekstamp:
    def test_from_item(self):
        stamp = Weekstamp.from_item(PredictionItem(3, 14, 0.2))
        assert stamp == Weekstamp(day_of_week=3, hour_of_day=14)
        assert stamp.day_name == "Wednesday"

    def test_hashable(self):
        assert len({Weekstamp(1, 2), Weekstamp(1, 2), Weekstamp(2, 1)}) == 2


class TestPublishPredictionPayload:
    def test_to_prediction(self):
        payload = PublishPredictionPayload.model_validate({
            "channel_id": "UC_a",
            "title": "Riffs",
            "gradient": 0.82,
            "prediction_items": [
                {"day_of_week": 1, "hour_of_day": 19, "deviation_from_average": 0.3},
            ],
        })

        prediction = payload.to_prediction()
        assert prediction.channel_id == "UC_a"
        assert prediction.prediction_items == [PredictionItem(1, 19, 0.3)]

    def test_rejects_invalid_hour(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            PublishPredictionPayload.model_validate({
                "channel_id": "UC_a",
                "gradient": 0.8,
                "prediction_items": [
                    {"day_of_week": 1, "hour_of_day": 24, "deviation_from_average": 0.3},
                ],
            })

"""
Tests for FeeEvent and FeeTracker.
"""

import pytest

from fee_sources import ConfirmationStatus, FeeEvent, FeeEventSource, FeeTracker


def event(signature: str, amount: float, timestamp: int = 100) -> FeeEvent:
    return FeeEvent(
        signature=signature,
        timestamp=timestamp,
        amount_sol=amount,
        source=FeeEventSource.MOCK,
        confirmation_status=ConfirmationStatus.FINALIZED,
    )


class TestFeeTracker:
    """Tests for the shared accumulator."""

    def test_record_accumulates(self):
        tracker = FeeTracker()

        recorded = tracker.record([event("a", 1.0, 100), event("b", 0.5, 200)])

        assert [e.signature for e in recorded] == ["a", "b"]
        assert tracker.total_fees_collected == pytest.approx(1.5)
        assert tracker.last_processed_signature == "b"
        assert tracker.last_processed_timestamp == 200

    def test_duplicates_skipped(self):
        tracker = FeeTracker()
        tracker.record([event("a", 1.0)])

        recorded = tracker.record([event("a", 1.0), event("c", 0.25)])

        assert [e.signature for e in recorded] == ["c"]
        assert tracker.total_fees_collected == pytest.approx(1.25)
        assert len(tracker.events) == 2

    def test_reset_claims_everything(self):
        tracker = FeeTracker()
        tracker.record([event("a", 1.0), event("b", 2.0)])

        claimed = tracker.reset_collected()

        assert claimed == pytest.approx(3.0)
        assert tracker.total_fees_collected == 0
        assert tracker.pending_events == []
        assert tracker.lifetime_fees_sol == pytest.approx(3.0)

    def test_new_events_after_reset_are_pending(self):
        tracker = FeeTracker()
        tracker.record([event("a", 1.0)])
        tracker.reset_collected()
        tracker.record([event("b", 0.2)])

        assert [e.signature for e in tracker.pending_events] == ["b"]
        assert tracker.total_fees_collected == pytest.approx(0.2)

    def test_seen_rebuilt_from_events(self):
        tracker = FeeTracker(events=[event("a", 1.0)])

        assert tracker.record([event("a", 1.0)]) == []

    def test_snapshot(self):
        tracker = FeeTracker()
        tracker.record([event("a", 1.0)])

        snapshot = tracker.snapshot()

        assert snapshot["totalFeesCollected"] == 1.0
        assert snapshot["eventCount"] == 1
        assert snapshot["pendingEventCount"] == 1
        assert snapshot["lastProcessedSignature"] == "a"


class TestFeeEvent:
    """Tests for event serialization."""

    def test_dict_round_trip(self):
        original = event("sig", 0.75)
        assert FeeEvent.from_dict(original.to_dict()) == original

    def test_from_dict_defaults(self):
        parsed = FeeEvent.from_dict({"signature": "x", "timestamp": 5, "amountSol": "1.5"})

        assert parsed.amount_sol == 1.5
        assert parsed.source == FeeEventSource.API
        assert parsed.confirmation_status == ConfirmationStatus.PROCESSED

import pytest

from tradewatch.models import PricePoint, PriceSnapshot
from tradewatch.viewmodel import PriceViewModel


@pytest.fixture
def view_model() -> PriceViewModel:
    """Provides an empty view model."""
    return PriceViewModel()


def test_initial_state(view_model: PriceViewModel) -> None:
    """Before any price, the series is empty and the change is zero."""
    assert view_model.series == []
    assert view_model.last_price is None
    assert view_model.change_pct == 0.0
    assert view_model.price_text == "Current Price: --"
    assert view_model.change_text == "Price Change: 0.00%"
    assert view_model.label == "BTC/USDT Price"


def test_first_price_has_zero_change(view_model: PriceViewModel) -> None:
    """The very first observation reports a 0% change."""
    snapshot = view_model.record_price(64000.0)
    assert snapshot == PriceSnapshot(
        point=PricePoint(0, 64000.0), price=64000.0, change_pct=0.0
    )
    assert view_model.price_text == "Current Price: $64000.00"
    assert view_model.change_text == "Price Change: 0.00%"


def test_change_is_relative_to_previous_price(view_model: PriceViewModel) -> None:
    """Change is (new - old) / old * 100, against the previous price only."""
    view_model.record_price(100.0)
    view_model.record_price(110.0)
    assert view_model.change_pct == pytest.approx(10.0)

    view_model.record_price(99.0)
    assert view_model.change_pct == pytest.approx(-10.0)
    assert view_model.change_text == "Price Change: -10.00%"


def test_tick_index_increments_per_point(view_model: PriceViewModel) -> None:
    """Each recorded price appends one point with the next tick index."""
    for price in (1.0, 2.0, 3.0):
        view_model.record_price(price)
    assert view_model.series == [
        PricePoint(0, 1.0),
        PricePoint(1, 2.0),
        PricePoint(2, 3.0),
    ]
    assert len(view_model) == 3


def test_previous_price_of_zero_gives_zero_change(view_model: PriceViewModel) -> None:
    """A zero previous price cannot be divided by, so the change is 0."""
    view_model.record_price(0.0)
    view_model.record_price(50.0)
    assert view_model.change_pct == 0.0


def test_series_is_a_copy(view_model: PriceViewModel) -> None:
    """Mutating the returned series does not touch the model."""
    view_model.record_price(1.0)
    view_model.series.clear()
    assert len(view_model) == 1


def test_listeners_receive_snapshots(view_model: PriceViewModel) -> None:
    """Listeners are called after each recorded price, and can be removed."""
    received: list[PriceSnapshot] = []
    view_model.add_listener(received.append)
    view_model.add_listener(received.append)  # Registered once only

    view_model.record_price(10.0)
    view_model.record_price(20.0)
    assert [s.price for s in received] == [10.0, 20.0]
    assert received[-1].change_pct == pytest.approx(100.0)

    view_model.remove_listener(received.append)
    view_model.record_price(30.0)
    assert len(received) == 2


def test_failing_listener_does_not_break_others(
    view_model: PriceViewModel, log_messages: list[str]
) -> None:
    """One broken listener is logged; the rest still run."""
    received: list[PriceSnapshot] = []

    def broken(_snapshot: PriceSnapshot) -> None:
        raise RuntimeError("boom")

    view_model.add_listener(broken)
    view_model.add_listener(received.append)
    view_model.record_price(5.0)

    assert len(received) == 1
    assert view_model.last_price == 5.0
    assert any(m.startswith("ERROR|Price listener") for m in log_messages)


def test_reset(view_model: PriceViewModel) -> None:
    """Reset returns to the initial state and restarts the tick index."""
    view_model.record_price(10.0)
    view_model.record_price(11.0)
    view_model.reset()
    assert view_model.series == []
    assert view_model.last_price is None
    assert view_model.change_pct == 0.0
    assert view_model.record_price(12.0).point == PricePoint(0, 12.0)

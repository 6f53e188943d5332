"""Unit tests for the Ticket aggregate.

Run with: pytest tests/test_tickets.py -v
"""

import pytest

from core.domain.value_objects import Money
from tickets.domain import (
    Ticket,
    TicketCreateError,
    TicketStatus,
    TicketType,
    TicketUpdateError,
    TicketUpdateProps,
)


def _with_units_sold(ticket: Ticket, sold: int) -> Ticket:
    """Rebuild ``ticket`` as an AVAILABLE tier that has already sold ``sold`` units."""
    data = ticket.to_dict()
    data["available_quantity"] = ticket.quantity - sold
    return Ticket.reconstitute(data)


class TestTicketCreate:
    """Tests for Ticket.create."""

    def test_new_tier_is_fully_available(self, make_ticket):
        ticket = make_ticket(quantity=50)
        assert ticket.status is TicketStatus.AVAILABLE
        assert ticket.available_quantity == 50
        assert ticket.is_active
        assert ticket.purchased_by is None

    def test_event_reference_is_kept_by_id(self, make_event, make_ticket):
        event = make_event()
        assert make_ticket(event=event).event_id == event.id

    def test_text_is_trimmed(self, make_ticket):
        assert make_ticket(name="  VIP  ").name == "VIP"

    def test_type_accepts_string_token(self, make_ticket):
        assert make_ticket(type="VIP").type is TicketType.VIP

    @pytest.mark.parametrize("price", [None, Money.zero("EUR")])
    def test_price_must_be_positive(self, make_ticket, price):
        with pytest.raises(TicketCreateError):
            make_ticket(price=price)

    @pytest.mark.parametrize("quantity", [0, -3, True])
    def test_quantity_must_be_positive_integer(self, make_ticket, quantity):
        with pytest.raises(TicketCreateError):
            make_ticket(quantity=quantity)

    def test_unknown_type_is_rejected(self, make_ticket):
        with pytest.raises(TicketCreateError):
            make_ticket(type="BACKSTAGE")

    def test_event_is_required(self, make_ticket):
        with pytest.raises(TicketCreateError):
            make_ticket(event=None)

    def test_name_length_is_bounded(self, make_ticket):
        assert len(make_ticket(name="x" * 100).name) == 100
        with pytest.raises(TicketCreateError, match="100 characters"):
            make_ticket(name="x" * 101)


class TestTicketPurchase:
    """Tests for purchase and cancel_purchase."""

    def test_single_unit_sells_once(self, make_ticket):
        """The last unit goes to the first buyer; the next purchase fails."""
        ticket = make_ticket(quantity=1).purchase("userX")
        assert ticket.available_quantity == 0
        assert ticket.status is TicketStatus.SOLD
        assert ticket.purchased_by == "userX"
        assert ticket.purchased_at is not None
        assert ticket.is_sold_out()
        with pytest.raises(TicketUpdateError):
            ticket.purchase("userY")

    def test_sold_tier_rejects_further_purchases(self, make_ticket):
        ticket = make_ticket(quantity=3).purchase("a")
        with pytest.raises(TicketUpdateError, match="not available"):
            ticket.purchase("b")
        assert ticket.available_quantity == 2

    def test_inactive_ticket_cannot_be_purchased(self, make_ticket):
        with pytest.raises(TicketUpdateError, match="inactive"):
            make_ticket().deactivate().purchase("a")

    def test_buyer_is_required(self, make_ticket):
        with pytest.raises(TicketUpdateError):
            make_ticket().purchase("")

    def test_cancel_purchase_restores_unit(self, make_ticket):
        ticket = make_ticket(quantity=1).purchase("a").cancel_purchase()
        assert ticket.available_quantity == 1
        assert ticket.status is TicketStatus.AVAILABLE
        assert ticket.purchased_by is None
        assert ticket.purchased_at is None

    def test_cancel_requires_sold_status(self, make_ticket):
        with pytest.raises(TicketUpdateError):
            make_ticket().cancel_purchase()

    def test_cancel_rejected_when_inactive(self, make_ticket):
        sold = make_ticket().purchase("a").deactivate()
        with pytest.raises(TicketUpdateError):
            sold.cancel_purchase()

    def test_availability_stays_in_bounds(self, make_ticket):
        ticket = make_ticket(quantity=2)
        for _ in range(3):
            ticket = ticket.purchase("a").cancel_purchase()
            assert 0 <= ticket.available_quantity <= ticket.quantity

    def test_total_value_counts_sold_units(self, make_ticket):
        ticket = make_ticket(quantity=5, price=Money.create(12.5, "EUR")).purchase("a")
        assert ticket.total_value() == Money.create(12.5, "EUR")


class TestTicketUpdate:
    """Tests for Ticket.update."""

    def test_no_changes_returns_same_instance(self, make_ticket):
        ticket = make_ticket()
        assert ticket.update(TicketUpdateProps(name=ticket.name)) is ticket

    def test_sold_ticket_rejects_update(self, make_ticket):
        """A ticket whose last sale left it SOLD cannot be edited."""
        sold = make_ticket(quantity=5).purchase("a")
        with pytest.raises(TicketUpdateError, match="purchased"):
            sold.update(TicketUpdateProps(name="Renamed"))
        with pytest.raises(TicketUpdateError):
            sold.update(TicketUpdateProps(quantity=10))

    def test_update_allowed_again_after_cancellation(self, make_ticket):
        restored = make_ticket(quantity=5).purchase("a").cancel_purchase()
        assert restored.update(TicketUpdateProps(name="Renamed")).name == "Renamed"

    def test_quantity_change_moves_availability(self, make_ticket):
        ticket = _with_units_sold(make_ticket(quantity=10), 1)
        updated = ticket.update(TicketUpdateProps(quantity=15))
        assert updated.quantity == 15
        assert updated.available_quantity == 14
        assert updated.sold_quantity == 1

    def test_quantity_cannot_drop_below_sold(self, make_ticket):
        ticket = _with_units_sold(make_ticket(quantity=5), 3)
        with pytest.raises(TicketUpdateError, match="already sold"):
            ticket.update(TicketUpdateProps(quantity=2))

    def test_quantity_reduction_to_sold_count(self, make_ticket):
        ticket = _with_units_sold(make_ticket(quantity=5), 1).update(TicketUpdateProps(quantity=1))
        assert ticket.available_quantity == 0

    def test_name_length_is_bounded(self, make_ticket):
        ticket = make_ticket()
        with pytest.raises(TicketUpdateError, match="100 characters"):
            ticket.update(TicketUpdateProps(name="x" * 101))

    def test_price_and_type_update(self, make_ticket):
        updated = make_ticket().update(TicketUpdateProps(price=Money.create(20), type="VIP"))
        assert updated.price == Money.create(20)
        assert updated.type is TicketType.VIP

    def test_invalid_price_is_rejected(self, make_ticket):
        with pytest.raises(TicketUpdateError):
            make_ticket().update(TicketUpdateProps(price=Money.zero()))


class TestTicketLifecycle:
    def test_deactivate_is_idempotent(self, make_ticket):
        inactive = make_ticket().deactivate()
        assert inactive.deactivate() is inactive
        assert inactive.activate().is_active

    def test_reconstitute_round_trip(self, make_ticket):
        ticket = make_ticket(quantity=4).purchase("a")
        restored = Ticket.reconstitute(ticket.to_dict())
        assert restored == ticket
        assert restored.to_dict() == ticket.to_dict()

    def test_status_predicates(self, make_ticket):
        ticket = make_ticket()
        assert ticket.is_available()
        assert ticket.purchase("a").is_purchased()
        assert not ticket.is_cancelled()

"""Django ORM models (persistence layer) for ticket tiers."""

from django.db import models

from tickets.domain.value_objects import TicketStatus, TicketType


class Ticket(models.Model):
    """Persistence model for ticket tiers.

    ``event_id`` is a plain column rather than a foreign key: the ticket
    aggregate only references its event by identity.
    """

    id = models.UUIDField(primary_key=True, editable=False)
    event_id = models.UUIDField(db_index=True)
    name = models.CharField(max_length=100)
    description = models.TextField()
    price_amount = models.DecimalField(max_digits=28, decimal_places=2)
    price_currency = models.CharField(max_length=3, default="EUR")
    quantity = models.PositiveIntegerField()
    available_quantity = models.PositiveIntegerField()
    type = models.CharField(
        max_length=16,
        choices=[(ticket_type.value, ticket_type.value) for ticket_type in TicketType],
    )
    status = models.CharField(
        max_length=16,
        choices=[(status.value, status.value) for status in TicketStatus],
        default=TicketStatus.AVAILABLE.value,
    )
    is_active = models.BooleanField(default=True)
    purchased_by = models.TextField(blank=True, null=True, db_index=True)
    purchased_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["type"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_quantity__lte=models.F("quantity")),
                name="ticket_available_lte_quantity",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} - {self.price_amount} {self.price_currency}"

from decimal import Decimal

from django.conf import settings
from django.db import models


class Quotation(models.Model):
    class Status(models.TextChoices):
        DRAFT = "Draft"
        PENDING_APPROVAL = "Pending Approval"
        SENT = "Sent"
        ACCEPTED = "Accepted"
        DECLINED = "Declined"

    class SignatureStatus(models.TextChoices):
        NOT_REQUESTED = "Not Requested"
        PENDING = "Pending"
        SIGNED = "Signed"

    customer = models.CharField(max_length=255)
    date = models.DateField()
    expiry_date = models.DateField()
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT
    )
    signature_status = models.CharField(
        max_length=20,
        choices=SignatureStatus.choices,
        default=SignatureStatus.NOT_REQUESTED,
    )
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="quotations",
        on_delete=models.PROTECT,
    )
    agent_name = models.CharField(max_length=255, blank=True)
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-date", "-id")

    @property
    def total(self):
        return sum((it.line_total for it in self.items.all()), Decimal("0"))

    def __str__(self):
        return f"Quotation {self.pk} for {self.customer} ({self.status})"


class QuotationItem(models.Model):
    quotation = models.ForeignKey(
        Quotation, related_name="items", on_delete=models.CASCADE
    )
    position = models.PositiveSmallIntegerField(default=0)
    product_id = models.CharField(max_length=64, blank=True)
    description = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ("position", "id")

    @property
    def line_total(self):
        return self.quantity * self.unit_price

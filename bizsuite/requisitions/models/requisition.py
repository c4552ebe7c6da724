from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class Requisition(models.Model):
    class RequestType(models.TextChoices):
        CASH = "cash", "Cash"
        MATERIAL = "material", "Material"

    class Status(models.TextChoices):
        PENDING = "Pending"
        APPROVED = "Approved"
        REJECTED = "Rejected"
        ISSUED = "Issued"
        DELIVERED = "Delivered"
        CANCELLED = "Cancelled"

    request_type = models.CharField(max_length=10, choices=RequestType.choices)
    title = models.CharField(max_length=255)
    reason = models.TextField()
    amount_or_value = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING
    )
    current_stage = models.CharField(max_length=32, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="requisitions",
        on_delete=models.CASCADE,
    )
    needed_by_date = models.DateField()
    delivery_location = models.CharField(max_length=255, blank=True)
    chain_version = models.CharField(max_length=16, default="v1")
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at", "-id")

    def __str__(self):
        return f"{self.title} ({self.status})"

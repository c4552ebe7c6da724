from decimal import Decimal

from django.conf import settings
from django.db import models


class Order(models.Model):
    class Status(models.TextChoices):
        AWAITING_PAYMENT = "Awaiting Payment"
        PROCESSING = "Processing"
        SHIPPED = "Shipped"
        DELIVERED = "Delivered"
        PENDING = "Pending"
        CANCELLED = "Cancelled"

    class PaymentMethod(models.TextChoices):
        CASH = "cash"
        CARD = "card"
        MOBILE = "mobile"

    customer = models.CharField(max_length=255)
    date = models.DateField()
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.AWAITING_PAYMENT
    )
    quotation = models.OneToOneField(
        "sales.Quotation",
        null=True,
        blank=True,
        related_name="order",
        on_delete=models.SET_NULL,
    )
    agent = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="orders",
        on_delete=models.SET_NULL,
    )
    agent_name = models.CharField(max_length=255, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="approved_orders",
        on_delete=models.SET_NULL,
    )
    tracking_number = models.CharField(max_length=100, blank=True)
    carrier = models.CharField(max_length=100, blank=True)
    payment_method = models.CharField(
        max_length=10, choices=PaymentMethod.choices, blank=True
    )
    total_amount = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True
    )
    version = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-date", "-id")

    @property
    def total(self):
        return sum((it.line_total for it in self.items.all()), Decimal("0"))

    def __str__(self):
        return f"Order {self.pk} for {self.customer} ({self.status})"


class OrderItem(models.Model):
    order = models.ForeignKey(Order, related_name="items", on_delete=models.CASCADE)
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

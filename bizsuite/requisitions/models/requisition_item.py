from decimal import Decimal

from django.db import models


class RequisitionItem(models.Model):
    requisition = models.ForeignKey(
        "requisitions.Requisition", related_name="items", on_delete=models.CASCADE
    )
    position = models.PositiveSmallIntegerField(default=0)
    item_name = models.CharField(max_length=255)
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit = models.CharField(max_length=32, blank=True)
    unit_cost = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True
    )

    class Meta:
        ordering = ("position", "id")

    @property
    def line_total(self):
        return self.quantity * (self.unit_cost or Decimal("0"))

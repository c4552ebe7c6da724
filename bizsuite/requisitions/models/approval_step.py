from django.conf import settings
from django.db import models


class ApprovalStep(models.Model):
    class Status(models.TextChoices):
        PENDING = "Pending"
        APPROVED = "Approved"
        REJECTED = "Rejected"

    requisition = models.ForeignKey(
        "requisitions.Requisition",
        related_name="approval_steps",
        on_delete=models.CASCADE,
    )
    position = models.PositiveSmallIntegerField()
    role = models.CharField(max_length=32)
    status = models.CharField(
        max_length=10, choices=Status.choices, default=Status.PENDING
    )
    acted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        related_name="approval_steps",
        on_delete=models.SET_NULL,
    )
    timestamp = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ("position",)
        unique_together = ("requisition", "position")

    def __str__(self):
        return f"{self.role}: {self.status}"

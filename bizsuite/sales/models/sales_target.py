from django.db import models


class SalesTarget(models.Model):
    agent_name = models.CharField(max_length=255)
    period = models.CharField(max_length=7, help_text="YYYY-MM")
    target_amount = models.DecimalField(max_digits=14, decimal_places=2)

    class Meta:
        ordering = ("-period", "agent_name")
        unique_together = ("agent_name", "period")

    def __str__(self):
        return f"{self.agent_name} {self.period}: {self.target_amount}"

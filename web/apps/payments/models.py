from django.db import models
from django.utils import timezone


class PaymentModel(models.Model):
    # One row per gateway invoice
    class Status(models.TextChoices):
        CREATED = "created"
        PROCESSING = "processing"
        HOLD = "hold"
        SUCCESS = "success"
        FAILURE = "failure"
        REVERSED = "reversed"
        EXPIRED = "expired"
        ERROR = "error"

    rrn = models.CharField(max_length=64, null=True, blank=True)
    payment_id = models.CharField(max_length=128, null=True, blank=True)
    order_id = models.BigIntegerField(null=True, blank=True)
    user_id = models.BigIntegerField(default=0)
    # major units; the gateway speaks minor units
    amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    # gateway strings are stored verbatim, choices are informative only
    response_status = models.CharField(max_length=32, choices=Status.choices, default=Status.CREATED)
    failure_reason = models.TextField(null=True, blank=True)
    err_code = models.CharField(max_length=64, null=True, blank=True)
    invoice_id = models.CharField(max_length=128, null=True, blank=True, db_index=True)
    time = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "payments"
        ordering = ["-time"]

    def __str__(self):
        return f"{self.invoice_id} ({self.response_status})"

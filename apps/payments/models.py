import logging
from decimal import Decimal

from django.conf import settings
from django.db import models

from apps.orders.models import Order
from apps.utils.models import TimestampedModel
from apps.utils.price import Price

logger = logging.getLogger(__name__)


class PaymentStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    SUCCESS = "Success", "Success"
    FAILURE = "Failure", "Failure"
    INCOMPLETE = "Incomplete", "Incomplete"


class Payment(TimestampedModel):
    """
    A payment, or an attempt at one, against an order.
    """
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name="payments")
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="payments"
    )

    amount = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    currency = models.CharField(max_length=3, blank=True)
    method = models.CharField(max_length=50)
    status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING, db_index=True)

    # e.g. 'order_N7sl2...' for Razorpay, set when the gateway order is created
    gateway_order_id = models.CharField(max_length=100, blank=True, db_index=True)
    # e.g. 'pay_2983...', set once the gateway reports back
    transaction_id = models.CharField(max_length=100, blank=True, db_index=True)

    error_message = models.TextField(blank=True)
    gateway_response = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["pk"]
        indexes = [
            models.Index(fields=['transaction_id', 'status'], name='payment_txn_status_idx'),
        ]

    def __str__(self):
        return f"Payment #{self.pk} | {self.amount} | {self.status}"

    def save(self, *args, **kwargs):
        previous = None
        if self.pk is not None:
            previous = Payment.objects.filter(pk=self.pk).values_list("status", flat=True).first()

        super().save(*args, **kwargs)

        if self.status == PaymentStatus.SUCCESS and previous != PaymentStatus.SUCCESS:
            logger.info(f"Payment {self.pk} succeeded", extra={"order_id": self.order_id, "payment_id": self.pk})
            self._confirm_order()

    def _confirm_order(self):
        order = self.order
        if order.on_after_payment():
            return

        # Already confirmed (a cheque, say), only the payment state moves on
        order.refresh_from_db()
        if order.status == Order.Status.PENDING and order.is_paid():
            order.status = Order.Status.PROCESSING
        order.save()

    def price(self):
        return Price(self.amount, self.currency, self.order.base_currency_symbol)

    def client_payload(self):
        """What the storefront needs to continue the payment."""
        payload = {
            "id": self.pk,
            "method": self.method,
            "status": self.status,
            "amount": self.price().nice(),
        }
        if self.gateway_order_id:
            payload["gateway_order_id"] = self.gateway_order_id
            payload["key_id"] = settings.RAZORPAY_KEY_ID
        return payload


class WebhookLog(TimestampedModel):
    """
    Idempotency store for gateway webhook events.
    """
    event_id = models.CharField(max_length=200, unique=True, help_text="Unique ID from Provider")
    provider = models.CharField(max_length=20, default="Razorpay")
    is_processed = models.BooleanField(default=False)
    payload = models.JSONField()

    def __str__(self):
        return f"{self.provider} - {self.event_id}"

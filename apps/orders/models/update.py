from django.conf import settings
from django.db import models


class OrderUpdate(models.Model):
    """
    A note or status change recorded against an order. Updates are an
    audit trail and are never deleted on their own.
    """

    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        PROCESSING = "Processing", "Processing"
        DISPATCHED = "Dispatched", "Dispatched"
        CANCELLED = "Cancelled", "Cancelled"

    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="updates")
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="order_updates"
    )
    status = models.CharField(max_length=20, choices=Status.choices, blank=True)
    note = models.TextField(blank=True)
    visible = models.BooleanField(default=False, help_text="Show this update to the customer")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "pk"]

    def __str__(self):
        return f"Update on order #{self.order_id}: {self.status or 'note'}"

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        if self.status:
            order = self.order
            order.status = self.status
            order.save()

    def delete(self, *args, **kwargs):
        return 0, {}

    def visible_summary(self):
        return "True" if self.visible else ""

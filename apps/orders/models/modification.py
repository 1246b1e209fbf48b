from decimal import Decimal

from django.db import models

from apps.utils.price import Price


class Modification(models.Model):
    """
    A charge or discount applied to an order by a modifier
    (shipping, tax, ...). Subtotal modifiers also count toward the subtotal.
    """
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="modifications")
    modifier = models.CharField(max_length=100, help_text="Registry key of the modifier that added this")
    value = models.CharField(max_length=255, blank=True)
    description = models.CharField(max_length=255, blank=True)
    price = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    sub_total_modifier = models.BooleanField(default=False)
    sort = models.IntegerField(default=0)

    class Meta:
        ordering = ["sort", "pk"]

    def __str__(self):
        return self.description or self.modifier

    def amount(self):
        return Price(self.price, self.order.base_currency, self.order.base_currency_symbol)

import logging
from decimal import Decimal

from django.db import models

from apps.utils.price import Price
from apps.utils.validation import ValidationResult

logger = logging.getLogger(__name__)

MAX_QUANTITY = 2147483647


class Item(models.Model):
    """
    A line on an order. The price is a snapshot taken when the product
    was added, alongside the product and variation versions.
    """
    order = models.ForeignKey("orders.Order", on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey("catalog.Product", null=True, on_delete=models.SET_NULL, related_name="order_items")
    product_version = models.PositiveIntegerField(default=1)
    variation = models.ForeignKey(
        "catalog.Variation", null=True, blank=True, on_delete=models.SET_NULL, related_name="order_items"
    )
    variation_version = models.PositiveIntegerField(null=True, blank=True)
    price = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    quantity = models.IntegerField(default=1)

    class Meta:
        ordering = ["pk"]

    def __str__(self):
        return f"{self.quantity} x {self.product or 'removed product'}"

    def amount(self):
        order = self.order
        amount = self.price
        # Standing orders are always charged at the current product price
        if order.is_standing_order() and self.product is not None:
            amount = self.product.amount
        return Price(amount, order.base_currency, order.base_currency_symbol)

    def unit_amount(self):
        item_amount = self.amount()
        amount = item_amount.amount
        for item_option in self.item_options.all():
            amount += item_option.amount().amount
        return item_amount.with_amount(amount)

    def total(self):
        unit = self.unit_amount()
        return unit.with_amount(unit.amount * self.quantity)

    def validate(self):
        result = ValidationResult()
        product = self.product
        variation = self.variation
        quantity = self.quantity

        if product is None or not product.is_published:
            result.add_error("Sorry this product is no longer available", "ProductExistsError")

        if product is not None and product.requires_variation() and (
            variation is None or not variation.validate_for_cart().is_valid()
        ):
            result.add_error("Sorry, these product options are no longer available.", "VariationExistsError")
        elif variation is not None and not variation.validate_for_cart().is_valid():
            result.add_error("Sorry, these product options are no longer available", "VariationIncorrectError")

        if not isinstance(quantity, int) or quantity <= 0 or quantity > MAX_QUANTITY:
            result.add_error("Quantity for this product needs to be between 1 - 2,147,483,647", "QuantityError")

        return result

    def validate_for_cart(self):
        return self.validate()

    def summary_of_options(self):
        options = []
        if self.variation is not None:
            options.append(self.variation.summary_of_options())
        options.extend(self.item_options.values_list("description", flat=True))
        return "<br /> ".join(options)

    def delete(self, *args, **kwargs):
        self.item_options.all().delete()
        return super().delete(*args, **kwargs)


class ItemOption(models.Model):
    """An extra charged against an item, e.g. gift wrapping."""
    item = models.ForeignKey(Item, on_delete=models.CASCADE, related_name="item_options")
    description = models.CharField(max_length=255)
    price = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))

    def __str__(self):
        return self.description

    def amount(self):
        order = self.item.order
        return Price(self.price, order.base_currency, order.base_currency_symbol)

"""
Order modifiers. Each one adds at most one Modification to an order when
the order's modifications are recalculated. The active set comes from
``settings.SHOP_MODIFIERS``.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.utils.module_loading import import_string

from apps.utils.price import Price

logger = logging.getLogger(__name__)


class Modifier:
    key = None
    title = ""
    sub_total_modifier = False
    sort = 0

    def __init__(self):
        if self.key is None:
            self.key = self.__class__.__name__

    def add(self, order, value=None):
        raise NotImplementedError

    def form_fields(self, order):
        return {}

    def create_modification(self, order, amount, description, value=""):
        from apps.orders.models import Modification

        return Modification.objects.create(
            order=order,
            modifier=self.key,
            value=value or "",
            description=description,
            price=amount,
            sub_total_modifier=self.sub_total_modifier,
            sort=self.sort,
        )


class FlatRateShipping(Modifier):
    key = "FlatRateShipping"
    title = "Shipping"
    sort = 10

    DELIVERY = "delivery"
    PICKUP = "pickup"

    def fee(self):
        return Decimal(str(settings.BASE_DELIVERY_FEE))

    def add(self, order, value=None):
        value = value or self.DELIVERY
        if value == self.PICKUP:
            return None
        return self.create_modification(order, self.fee(), "Delivery", value)

    def form_fields(self, order):
        fee = Price(self.fee(), order.base_currency, order.base_currency_symbol)
        return {
            "key": self.key,
            "title": self.title,
            "choices": [
                {"value": self.DELIVERY, "title": f"Delivery ({fee.nice()})"},
                {"value": self.PICKUP, "title": "Pick up"},
            ],
        }


class TaxModifier(Modifier):
    key = "TaxModifier"
    title = "Tax"
    sub_total_modifier = True
    sort = 0

    def rate(self):
        return Decimal(str(settings.SHOP_TAX_RATE))

    def add(self, order, value=None):
        rate = self.rate()
        if not rate:
            return None

        items_total = sum((item.total().amount for item in order.items.all()), Decimal("0"))
        amount = Price.quantize(items_total * rate)
        return self.create_modification(order, amount, f"Tax ({(rate * 100).normalize():f}%)")

    def form_fields(self, order):
        return {"key": self.key, "title": self.title, "choices": []}


def get_modifiers():
    modifiers = []
    for path in settings.SHOP_MODIFIERS:
        path = path.strip()
        if not path:
            continue
        modifiers.append(import_string(path)())
    return modifiers

import logging
from datetime import timedelta

from django.db import models

from apps.utils.models import TimestampedModel

logger = logging.getLogger(__name__)


class ShopConfig(TimestampedModel):
    """
    Site-wide shop settings. There is only ever one row.
    """

    class TimeoutUnit(models.TextChoices):
        HOUR = "hour", "Hour"
        DAY = "day", "Day"
        WEEK = "week", "Week"

    base_currency = models.CharField(max_length=3, blank=True, help_text="ISO code, e.g. NZD")
    base_currency_symbol = models.CharField(max_length=10, blank=True, default="$")
    base_currency_precision = models.PositiveSmallIntegerField(default=2)

    cart_timeout = models.PositiveIntegerField(default=1)
    cart_timeout_unit = models.CharField(max_length=10, choices=TimeoutUnit.choices, default=TimeoutUnit.HOUR)

    receipt_from = models.EmailField(blank=True)
    receipt_subject = models.CharField(max_length=255, blank=True, default="Your order receipt")
    receipt_body = models.TextField(blank=True)
    email_signature = models.TextField(blank=True)

    class Meta:
        verbose_name = "Shop settings"
        verbose_name_plural = "Shop settings"

    def __str__(self):
        return "Shop settings"

    @classmethod
    def current(cls):
        config = cls.objects.order_by('pk').first()
        if config is None:
            config = cls.objects.create()
            logger.info("Created default shop settings")
        return config

    def cart_timeout_delta(self):
        units = {
            self.TimeoutUnit.HOUR: timedelta(hours=1),
            self.TimeoutUnit.DAY: timedelta(days=1),
            self.TimeoutUnit.WEEK: timedelta(weeks=1),
        }
        return units.get(self.cart_timeout_unit, timedelta(hours=1)) * self.cart_timeout

    def default_attributes(self):
        return self.attributes.filter(is_default=True, product__isnull=True).order_by('sort_order')

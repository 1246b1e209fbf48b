import datetime
import logging

from dateutil.rrule import rrule, WEEKLY
from django.db import models, transaction
from django.db.models import Max
from django.utils import timezone

from .order import Order

logger = logging.getLogger(__name__)


class StandingOrder(Order):
    """
    An order that is placed again on a weekly or fortnightly schedule.
    Shares its row (and primary key) with the Order it was cast from.
    """

    class Frequency(models.TextChoices):
        WEEKLY = "Weekly", "Weekly"
        FORTNIGHTLY = "Fortnightly", "Fortnightly"

    INTERVALS = {
        Frequency.WEEKLY: 1,
        Frequency.FORTNIGHTLY: 2,
    }

    frequency = models.CharField(max_length=20, choices=Frequency.choices, default=Frequency.WEEKLY)
    start_date = models.DateField(null=True, blank=True)
    name = models.CharField(max_length=255, blank=True)
    enabled = models.BooleanField(default=True)

    def __str__(self):
        return self.cart_name()

    def save(self, *args, **kwargs):
        previous = (
            StandingOrder.objects.filter(pk=self.pk).values_list("enabled", flat=True).first()
            if self.pk is not None else None
        )
        if previous is None or previous != self.enabled:
            if self.enabled:
                logger.info("Standing order enabled", extra={"standing_order_id": self.pk})
            else:
                logger.info("Standing order disabled", extra={"standing_order_id": self.pk})
        super().save(*args, **kwargs)

    def cart_name(self):
        return self.name or f"Standing Order #{self.pk}"

    def period(self):
        interval = self.INTERVALS.get(self.frequency)
        if not self.start_date or not interval:
            return None
        # No end date: recurs indefinitely from the start date
        return rrule(
            WEEKLY,
            interval=interval,
            dtstart=datetime.datetime.combine(self.start_date, datetime.time.min),
        )

    def should_run(self, today=None):
        today = today or timezone.localdate()
        log_extra = {"standing_order_id": self.pk}

        latest = self.orders.filter(created_at__date__lte=today).aggregate(latest=Max("created_at"))["latest"]
        latest_date = timezone.localtime(latest).date() if latest else datetime.date(1980, 1, 1)

        period = self.period()
        if period is None:
            logger.error("Standing order has no valid period", extra=log_extra)
            return False

        if self.start_date > today:
            logger.info("Standing order not in active period", extra=log_extra)
            return False

        # Most recent recurrence on or before today
        recurrence = period.before(datetime.datetime.combine(today, datetime.time.max), inc=True)
        if recurrence is None or recurrence.date() <= latest_date:
            logger.info(f"Standing order not yet due or already placed ({recurrence})", extra=log_extra)
            return False

        if recurrence.date() != today:
            logger.info(
                f"Standing order placement was missed and the window has expired ({recurrence.date()})",
                extra=log_extra,
            )
            return False

        return True

    def place_order(self):
        """Create a Pending order from this standing order at today's prices."""
        from apps.emails.emails import ReceiptEmail
        from .item import Item, ItemOption

        with transaction.atomic():
            order = Order.objects.create(
                member=self.member,
                status=Order.Status.PENDING,
                ordered_on=timezone.now(),
                standing_order=self,
                base_currency=self.base_currency,
                base_currency_symbol=self.base_currency_symbol,
            )

            for item in self.items.select_related("product", "variation").prefetch_related("item_options"):
                if item.product is None:
                    logger.warning(
                        f"Skipping item {item.pk}, its product no longer exists",
                        extra={"standing_order_id": self.pk},
                    )
                    continue

                price = item.product.amount
                if item.variation is not None:
                    price += item.variation.amount

                new_item = Item.objects.create(
                    order=order,
                    product=item.product,
                    product_version=item.product.version,
                    variation=item.variation,
                    variation_version=item.variation.version if item.variation is not None else None,
                    price=price,
                    quantity=item.quantity,
                )
                for item_option in item.item_options.all():
                    ItemOption.objects.create(
                        item=new_item, description=item_option.description, price=item_option.price
                    )

            modifiers = {m.modifier: m.value for m in self.modifications.all()}
            order.update_modifications({"Modifiers": modifiers})

        logger.info(
            f"Placed order {order.pk} from standing order {self.pk}",
            extra={"standing_order_id": self.pk, "order_id": order.pk},
        )

        if order.member is not None:
            ReceiptEmail(order.member, order).send()
        return order

    @transaction.atomic
    def as_plain_order(self):
        """Drop the standing order row, keeping the underlying order."""
        pk = self.pk
        models.Model.delete(self, keep_parents=True)
        logger.info(f"Standing order {pk} cast to a plain order", extra={"order_id": pk})
        return Order.objects.get(pk=pk)

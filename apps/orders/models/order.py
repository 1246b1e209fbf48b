import logging
from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.urls import reverse
from django.utils import timezone

from apps.utils.exceptions import BusinessLogicException
from apps.utils.models import TimestampedModel
from apps.utils.price import Price
from apps.utils.validation import ValidationResult

logger = logging.getLogger(__name__)


class Order(TimestampedModel):
    """
    An order. While its status is Cart it lives in the customer's session;
    checkout moves it to Pending and payment to Processing.
    """

    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        PROCESSING = "Processing", "Processing"
        DISPATCHED = "Dispatched", "Dispatched"
        CANCELLED = "Cancelled", "Cancelled"
        CART = "Cart", "Cart"
        STANDING = "Standing Order", "Standing Order"

    class PaymentStatus(models.TextChoices):
        UNPAID = "Unpaid", "Unpaid"
        PAID = "Paid", "Paid"
        STANDING = "Standing", "Standing"

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.CART, db_index=True)
    payment_status = models.CharField(max_length=10, choices=PaymentStatus.choices, default=PaymentStatus.UNPAID)
    redirect_url_hit = models.BooleanField(default=False)

    total_price = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    sub_total_price = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    base_currency = models.CharField(max_length=3, blank=True)
    base_currency_symbol = models.CharField(max_length=10, blank=True)

    ordered_on = models.DateTimeField(null=True, blank=True)
    last_active = models.DateTimeField(null=True, blank=True, db_index=True)
    env = models.CharField(max_length=10, blank=True)

    member = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="orders"
    )
    standing_order = models.ForeignKey(
        "orders.StandingOrder", null=True, blank=True, on_delete=models.SET_NULL, related_name="orders",
        help_text="The standing order this order was placed from",
    )

    class Meta:
        ordering = ["-id"]

    def __str__(self):
        return f"Order #{self.pk} [{self.status}]"

    def save(self, *args, **kwargs):
        from apps.shop.models import ShopConfig

        if self._state.adding and not self.last_active:
            self.last_active = timezone.now()

        if not self.base_currency or not self.base_currency_symbol:
            shop = ShopConfig.current()
            self.base_currency = shop.base_currency
            self.base_currency_symbol = shop.base_currency_symbol

        first_id = settings.SHOP_ORDER_FIRST_ID
        if self.pk is None and first_id and first_id > 0 and not Order.objects.exists():
            self.pk = first_id

        self.env = settings.SHOP_ENVIRONMENT

        if self.is_standing_order():
            self.payment_status = self.PaymentStatus.STANDING
        else:
            self.payment_status = self.PaymentStatus.PAID if self.is_paid() else self.PaymentStatus.UNPAID

        super().save(*args, **kwargs)

    # --- Casting between plain and standing orders ---

    def is_standing_order(self):
        from .standing import StandingOrder

        if isinstance(self, StandingOrder):
            return True
        if self.pk is None:
            return False
        return StandingOrder.objects.filter(pk=self.pk).exists()

    def is_confirmed_standing_order(self):
        return self.is_standing_order() and self.status == self.Status.STANDING

    def as_specific(self):
        """The StandingOrder row for this order if there is one, else self."""
        from .standing import StandingOrder

        if isinstance(self, StandingOrder) or self.pk is None:
            return self
        return StandingOrder.objects.filter(pk=self.pk).first() or self

    @transaction.atomic
    def as_standing_order(self, **fields):
        from .standing import StandingOrder

        if self.is_standing_order():
            standing = self.as_specific()
        else:
            if self.pk is None:
                self.save()
            standing = StandingOrder(order_ptr_id=self.pk)
            for field in Order._meta.local_concrete_fields:
                setattr(standing, field.attname, getattr(self, field.attname))
            logger.info(f"Order {self.pk} cast to a standing order", extra={"order_id": self.pk})

        for name, value in fields.items():
            setattr(standing, name, value)
        standing.save()
        return standing

    # --- Prices ---

    def _price(self, amount):
        return Price(amount, self.base_currency, self.base_currency_symbol)

    def total(self):
        return self._price(self.total_price)

    def sub_total(self):
        return self._price(self.sub_total_price)

    @property
    def total_price_display(self):
        return self.total()

    @property
    def sub_total_display(self):
        return self.sub_total()

    def summary_of_total(self):
        return self.total().nice()

    def cart_total_price(self):
        amount = self.sub_total().amount
        for modification in self.sub_total_modifications():
            amount -= modification.amount().amount
        return self._price(amount)

    def item_count(self):
        if self.pk is None:
            return 0
        return self.items.aggregate(count=models.Sum("quantity"))["count"] or 0

    def total_paid(self):
        paid = Decimal("0")
        if self.pk is not None:
            for payment in self.payments.filter(status="Success"):
                paid += payment.amount
        return self._price(paid)

    def total_outstanding(self):
        outstanding = self.total().amount - self.total_paid().amount
        return self._price(max(outstanding, Decimal("0")))

    def is_paid(self):
        return (self.total().amount - self.total_paid().amount) <= 0

    # --- Items and totals ---

    def find_identical_item(self, product, variation=None, options=()):
        items = self.items.filter(product_id=product.pk, product_version=product.version)
        if variation is not None:
            items = items.filter(variation_id=variation.pk, variation_version=variation.version)

        wanted = {o["description"]: Price.quantize(o.get("price")) for o in options}
        for item in items:
            existing = {o.description: Price.quantize(o.price) for o in item.item_options.all()}
            if existing == wanted:
                return item
        return None

    def add_item(self, product, variation=None, quantity=1, options=()):
        from .item import Item, ItemOption, MAX_QUANTITY

        try:
            with transaction.atomic():
                item = self.find_identical_item(product, variation, options)
                if item is not None:
                    if item.quantity + quantity > MAX_QUANTITY:
                        raise BusinessLogicException(
                            "The quantity must be less than 2,147,483,647", code="quantity_limit"
                        )
                    item.quantity += quantity
                    item.save(update_fields=["quantity"])
                else:
                    price = product.amount
                    if variation is not None:
                        price += variation.amount
                    item = Item.objects.create(
                        order=self,
                        product=product,
                        product_version=product.version,
                        variation=variation,
                        variation_version=variation.version if variation is not None else None,
                        price=price,
                        quantity=quantity,
                    )
                    for option in options:
                        ItemOption.objects.create(
                            item=item,
                            description=option["description"],
                            price=option.get("price") or 0,
                        )
                self.update_total()
        except Exception:
            logger.warning(
                f"Could not add product {product.pk} to order {self.pk}",
                extra={"order_id": self.pk},
                exc_info=True,
            )
            raise
        return item

    def update_total(self):
        total = Decimal("0")
        sub_total = Decimal("0")

        if self.pk is not None:
            for item in self.items.prefetch_related("item_options"):
                item_total = item.total().amount
                total += item_total
                sub_total += item_total

            for modification in self.modifications.all():
                if modification.sub_total_modifier:
                    total += modification.amount().amount
                    sub_total += modification.amount().amount
                else:
                    total += modification.amount().amount

        self.sub_total_price = sub_total
        self.total_price = total

        # Unsaved carts only keep the figures in memory
        if self.pk is not None:
            self.save()

    def update_modifications(self, data):
        from apps.orders.modifiers import get_modifiers

        self.modifications.all().delete()
        self.update_total()

        values = (data or {}).get("Modifiers") or {}
        for modifier in get_modifiers():
            modifier.add(self, values.get(modifier.key))
            self.update_total()
        return self

    def validate_for_cart(self):
        result = ValidationResult()
        items = list(self.items.all()) if self.pk is not None else []

        if not self.base_currency:
            result.add_error("Base currency is not set for this order", "BaseCurrencyError")

        if not items:
            result.add_error("There are no items in this order", "ItemExistsError")

        for item in items:
            if not item.validate_for_cart().is_valid():
                result.add_error(
                    "Some of the items in this order are no longer available, please go to the cart and remove them.",
                    "ItemValidationError",
                )
                break

        return result

    def sub_total_modifications(self):
        if self.pk is None:
            return []
        return self.modifications.filter(sub_total_modifier=True)

    def total_modifications(self):
        if self.pk is None:
            return []
        return self.modifications.filter(sub_total_modifier=False)

    def customer_updates(self):
        return self.updates.filter(visible=True).order_by("created_at")

    def cart_name(self):
        return "Cart"

    def link(self):
        return reverse("account-order-detail", kwargs={"pk": self.pk})

    def summary_of_payment_status(self):
        payments = list(self.payments.order_by("pk")) if self.pk is not None else []
        if len(payments) == 1:
            return f"Payment {payments[0].status}"
        return ", ".join(f"Payment #{payment.pk} {payment.status}" for payment in payments)

    # --- Permissions ---

    def can_view(self, user=None):
        if user is None or not user.is_authenticated:
            return False
        if not user.has_perm("orders.view_order"):
            return False
        return user.is_superuser or user.pk == self.member_id

    def can_edit(self, user=None):
        return bool(user and user.is_superuser and user.has_perm("orders.change_order"))

    def can_create(self, user=None):
        return False

    def can_delete(self, user=None):
        if user is not None and user.is_superuser:
            return True
        if self.member is None:
            # Anonymous carts belong to whichever session holds them
            return self.status == self.Status.CART
        return self.member.is_selectable_order(self)

    def delete(self, *args, user=None, **kwargs):
        if not self.can_delete(user):
            logger.warning(f"Refused to delete order {self.pk}", extra={"order_id": self.pk})
            return 0, {}

        try:
            with transaction.atomic():
                self.payments.all().delete()
                for item in self.items.all():
                    item.delete()
                self.modifications.all().delete()
                self.updates.all().delete()
                return super().delete(*args, **kwargs)
        except Exception as e:
            logger.warning(f"Order {self.pk} could not be deleted: {e}", extra={"order_id": self.pk})
            raise BusinessLogicException(f"Order {self.pk} could not be deleted.", code="order_delete_failed") from e

    # --- Payment lifecycle ---

    def on_before_payment(self):
        logger.debug(f"on_before_payment redirect_url_hit={self.redirect_url_hit}", extra={"order_id": self.pk})
        if self.redirect_url_hit:
            self.redirect_url_hit = False
            self.save()

    def on_after_payment(self, request=None):
        from apps.emails.emails import ReceiptEmail
        from apps.orders.services import CartService

        if request is not None:
            CartService.clear(request)

        # Flip the flag in the database first so concurrent callers see it
        flipped = Order.objects.filter(pk=self.pk, redirect_url_hit=False).update(redirect_url_hit=True)
        if not flipped:
            logger.debug("Redirect url already hit", extra={"order_id": self.pk})
            return False

        self.redirect_url_hit = True
        paid = self.is_paid()
        self.status = self.Status.PROCESSING if paid else self.Status.PENDING
        self.payment_status = self.PaymentStatus.PAID if paid else self.PaymentStatus.UNPAID
        if self.is_standing_order():
            self.status = self.Status.STANDING
            self.payment_status = self.PaymentStatus.STANDING
        self.save()

        if self.member is not None:
            ReceiptEmail(self.member, self).send()
        logger.info(f"Order {self.pk} now {self.status}", extra={"order_id": self.pk})
        return True

    # --- Housekeeping ---

    @classmethod
    def delete_abandoned(cls, now=None):
        from apps.shop.models import ShopConfig

        now = now or timezone.now()
        cutoff = now - ShopConfig.current().cart_timeout_delta()

        abandoned = cls.objects.filter(
            status=cls.Status.CART,
            last_active__lt=cutoff,
            payments__isnull=True,
        ).distinct()

        deleted = 0
        for order in abandoned:
            order = order.as_specific()
            count, _ = order.delete()
            if count:
                deleted += 1

        logger.info(f"Deleted {deleted} abandoned carts last active before {cutoff.isoformat()}")
        return deleted

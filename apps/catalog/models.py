# apps/catalog/models.py
import logging
from collections import OrderedDict
from decimal import Decimal

from django.db import models, transaction

from apps.utils.models import TimestampedModel
from apps.utils.price import Price
from apps.utils.validation import ValidationResult

logger = logging.getLogger(__name__)


class Product(TimestampedModel):
    """
    A sellable product. Orders snapshot the version they were priced at.
    """
    title = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    is_published = models.BooleanField(default=True, db_index=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["title"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if self.pk:
            previous = Product.objects.filter(pk=self.pk).values("title", "amount").first()
            if previous and (
                previous["title"] != self.title
                or Decimal(previous["amount"]) != Decimal(str(self.amount))
            ):
                self.version += 1
                logger.info(f"Product {self.pk} changed, now at version {self.version}")
        super().save(*args, **kwargs)

    def price(self):
        from apps.shop.models import ShopConfig

        shop = ShopConfig.current()
        return Price(self.amount, shop.base_currency, shop.base_currency_symbol)

    def requires_variation(self):
        return self.attributes.exists()

    def get_options_for_attribute(self, attribute_id):
        return Option.objects.filter(
            product=self, attribute_id=attribute_id
        ).order_by("sort_order", "pk")

    def enabled_variations(self):
        return self.variations.filter(status=Variation.Status.ENABLED)

    def variation_price_map(self):
        base = self.price()
        price_map = []
        for variation in self.enabled_variations().prefetch_related("options"):
            price_map.append({
                "price": base.with_amount(base.amount + Price.quantize(variation.amount)).nice(),
                "options": [option.pk for option in variation.options.all()],
                "free": "Free",
            })
        return price_map

    def find_variation(self, options):
        """
        The enabled variation whose {attribute id: option id} map equals
        ``options``, if any.
        """
        try:
            wanted = {int(attribute_id): int(option_id) for attribute_id, option_id in (options or {}).items()}
        except (TypeError, ValueError):
            return None
        for variation in self.enabled_variations().prefetch_related("options"):
            if variation.option_map() == wanted:
                return variation
        return None


class Attribute(models.Model):
    """
    A product attribute (e.g. Size). Default attributes belong to the shop
    config and are copied onto products on request.
    """
    title = models.CharField(max_length=100, help_text="For displaying on the product page")
    description = models.CharField(max_length=255, blank=True, help_text="For displaying on the order")
    sort_order = models.IntegerField(default=0)
    product = models.ForeignKey(
        Product, null=True, blank=True, on_delete=models.CASCADE, related_name="attributes"
    )
    default_attribute = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.SET_NULL, related_name="copies",
        limit_choices_to={"is_default": True},
        help_text="Use existing attribute",
    )
    is_default = models.BooleanField(default=False)
    shop_config = models.ForeignKey(
        "shop.ShopConfig", null=True, blank=True, on_delete=models.CASCADE, related_name="attributes"
    )

    class Meta:
        ordering = ["sort_order", "pk"]

    def __str__(self):
        return self.title

    @transaction.atomic
    def save(self, *args, **kwargs):
        first_write = self._state.adding

        if self.is_default:
            self.product = None

        if first_write and self.default_attribute_id:
            self.title = self.default_attribute.title
            self.description = self.default_attribute.description

        super().save(*args, **kwargs)

        if first_write and self.default_attribute_id:
            for option in self.default_attribute.options.all():
                Option.objects.create(
                    title=option.title,
                    description=option.description,
                    sort_order=option.sort_order,
                    attribute=self,
                    product=self.product,
                )

        self.disable_invalid_variations()

    def disable_invalid_variations(self):
        if self.product_id is None:
            return
        for variation in self.product.variations.all():
            if variation.is_enabled() and not variation.has_valid_options():
                variation.status = Variation.Status.DISABLED
                variation.save(update_fields=["status", "updated_at"])
                logger.info(f"Variation {variation.pk} disabled, options no longer valid")

    def option_summary(self):
        return ", ".join(self.options.values_list("title", flat=True))

    def title_option_summary(self):
        return f"{self.title} - {self.option_summary()}"

    def option_field_map(self, prev=None):
        """
        For dependent dropdowns: maps each option of ``prev`` to the options
        of this attribute that some enabled variation combines it with.
        """
        if prev is None or self.product_id is None:
            return {}

        grouped = {}
        for variation in self.product.enabled_variations().prefetch_related("options"):
            prev_option = variation.get_option_for_attribute(prev.pk)
            option = variation.get_option_for_attribute(self.pk)
            if prev_option is not None and option is not None:
                grouped.setdefault(prev_option.pk, {})[option.pk] = option

        field_map = {}
        for prev_id, options in grouped.items():
            ordered = sorted(options.values(), key=lambda o: (o.sort_order, o.pk))
            field_map[prev_id] = OrderedDict((o.pk, o.title) for o in ordered)
        return field_map


class Option(models.Model):
    title = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    sort_order = models.IntegerField(default=0)
    attribute = models.ForeignKey(Attribute, on_delete=models.CASCADE, related_name="options")
    product = models.ForeignKey(
        Product, null=True, blank=True, on_delete=models.CASCADE, related_name="options"
    )

    class Meta:
        ordering = ["sort_order", "pk"]

    def __str__(self):
        return self.title

    def save(self, *args, **kwargs):
        if self.attribute_id and self.attribute.is_default:
            self.product = None
        elif self.product_id is None and self.attribute_id:
            self.product_id = self.attribute.product_id
        super().save(*args, **kwargs)


class Variation(TimestampedModel):
    """
    A combination of one option per product attribute, priced as a
    delta on top of the product amount.
    """

    class Status(models.TextChoices):
        ENABLED = "Enabled", "Enabled"
        DISABLED = "Disabled", "Disabled"

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variations")
    amount = models.DecimalField(max_digits=19, decimal_places=8, default=Decimal("0"))
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ENABLED)
    options = models.ManyToManyField(Option, blank=True, related_name="variations")
    version = models.PositiveIntegerField(default=1)

    class Meta:
        ordering = ["pk"]

    def __str__(self):
        return f"{self.product} ({self.summary_of_options() or 'no options'})"

    def save(self, *args, **kwargs):
        if self.pk:
            previous = Variation.objects.filter(pk=self.pk).values_list("amount", flat=True).first()
            if previous is not None and Decimal(previous) != Decimal(str(self.amount)):
                self.version += 1
        super().save(*args, **kwargs)

    def is_enabled(self):
        return self.status == self.Status.ENABLED

    def get_option_for_attribute(self, attribute_id):
        for option in self.options.all():
            if option.attribute_id == attribute_id:
                return option
        return None

    def has_valid_options(self):
        """Exactly one option for each of the product's attributes."""
        options = list(self.options.all())
        for attribute in self.product.attributes.all():
            if len([o for o in options if o.attribute_id == attribute.pk]) != 1:
                return False
        return True

    def validate_for_cart(self):
        result = ValidationResult()
        if not self.is_enabled():
            result.add_error("This product variation is not currently available.", "VariationStatusError")
        if not self.has_valid_options():
            result.add_error("This product variation does not have a valid set of options.", "VariationOptionsError")
        return result

    def summary_of_options(self):
        options = sorted(
            self.options.select_related("attribute"),
            key=lambda o: (o.attribute.sort_order, o.attribute.pk),
        )
        return ", ".join(f"{o.attribute.title}: {o.title}" for o in options)

    def option_map(self):
        return {option.attribute_id: option.pk for option in self.options.all()}

    def price(self):
        base = self.product.price()
        return base.with_amount(base.amount + Price.quantize(self.amount))

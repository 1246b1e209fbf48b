import logging

from django.contrib.auth import get_user_model
from rest_framework import serializers

from apps.shop.models import ShopConfig
from .models import Order, Item, Modification, OrderUpdate, StandingOrder
from .models.item import MAX_QUANTITY
from .modifiers import get_modifiers
from .services import CartService, CheckoutService

logger = logging.getLogger(__name__)

MEMBER_EXISTS_MESSAGE = (
    "Sorry, a member already exists with that email address. "
    "If this is your email address, please log in first before placing your order."
)


class ItemSerializer(serializers.ModelSerializer):
    product_title = serializers.CharField(source="product.title", read_only=True, default="")
    options = serializers.CharField(source="summary_of_options", read_only=True)
    unit_price = serializers.SerializerMethodField()
    total = serializers.SerializerMethodField()

    class Meta:
        model = Item
        fields = ["id", "product", "product_title", "variation", "options", "quantity", "unit_price", "total"]

    def get_unit_price(self, obj):
        return obj.unit_amount().nice()

    def get_total(self, obj):
        return obj.total().nice()


class ModificationSerializer(serializers.ModelSerializer):
    amount = serializers.SerializerMethodField()

    class Meta:
        model = Modification
        fields = ["id", "modifier", "value", "description", "amount", "sub_total_modifier"]

    def get_amount(self, obj):
        return obj.amount().nice()


class OrderUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderUpdate
        fields = ["id", "status", "note", "created_at"]


class CartSerializer(serializers.ModelSerializer):
    """Summary of an order, saved or not."""
    cart_name = serializers.SerializerMethodField()
    items = serializers.SerializerMethodField()
    modifications = serializers.SerializerMethodField()
    item_count = serializers.SerializerMethodField()
    sub_total = serializers.SerializerMethodField()
    cart_total = serializers.SerializerMethodField()
    total = serializers.SerializerMethodField()
    is_standing_order = serializers.SerializerMethodField()
    standing_order = serializers.SerializerMethodField()
    modifier_fields = serializers.SerializerMethodField()
    links = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "payment_status",
            "cart_name",
            "items",
            "modifications",
            "item_count",
            "sub_total",
            "cart_total",
            "total",
            "is_standing_order",
            "standing_order",
            "modifier_fields",
            "links",
        ]

    def get_cart_name(self, obj):
        return obj.cart_name()

    def get_items(self, obj):
        if obj.pk is None:
            return []
        return ItemSerializer(obj.items.select_related("product", "variation"), many=True).data

    def get_modifications(self, obj):
        if obj.pk is None:
            return []
        return ModificationSerializer(obj.modifications.all(), many=True).data

    def get_item_count(self, obj):
        return obj.item_count()

    def get_sub_total(self, obj):
        return obj.sub_total().nice()

    def get_cart_total(self, obj):
        return obj.cart_total_price().nice()

    def get_total(self, obj):
        return obj.total().nice()

    def get_is_standing_order(self, obj):
        return obj.is_standing_order()

    def get_standing_order(self, obj):
        if not isinstance(obj, StandingOrder):
            return None
        return {
            "name": obj.name,
            "frequency": obj.frequency,
            "start_date": obj.start_date,
            "enabled": obj.enabled,
            "confirmed": obj.is_confirmed_standing_order(),
        }

    def get_modifier_fields(self, obj):
        return [modifier.form_fields(obj) for modifier in get_modifiers()]

    def get_links(self, obj):
        return {kind: CartService.cart_link(kind) for kind in ("cart", "checkout", "account")}


class OrderSerializer(CartSerializer):
    """A placed order as the customer sees it in their account."""
    ordered_on = serializers.DateTimeField(read_only=True)
    updates = serializers.SerializerMethodField()
    payment_summary = serializers.SerializerMethodField()
    total_paid = serializers.SerializerMethodField()
    total_outstanding = serializers.SerializerMethodField()
    link = serializers.SerializerMethodField()

    class Meta(CartSerializer.Meta):
        fields = CartSerializer.Meta.fields + [
            "ordered_on",
            "updates",
            "payment_summary",
            "total_paid",
            "total_outstanding",
            "link",
        ]

    def get_updates(self, obj):
        return OrderUpdateSerializer(obj.customer_updates(), many=True).data

    def get_payment_summary(self, obj):
        return obj.summary_of_payment_status()

    def get_total_paid(self, obj):
        return obj.total_paid().nice()

    def get_total_outstanding(self, obj):
        return obj.total_outstanding().nice()

    def get_link(self, obj):
        return obj.link()


class QuantityField(serializers.IntegerField):
    default_error_messages = {
        "invalid": "The quantity must be a number",
        "min_value": "The quantity must be at least 1",
        "max_value": "The quantity must be less than 2,147,483,647",
    }


class AddToCartSerializer(serializers.Serializer):
    quantity = QuantityField(min_value=1, max_value=MAX_QUANTITY, default=1)
    options = serializers.DictField(child=serializers.IntegerField(), required=False, default=dict)

    def validate(self, attrs):
        product = self.context["product"]
        attrs["variation"] = None

        if product.requires_variation():
            variation = product.find_variation(attrs.get("options"))
            if variation is None:
                raise serializers.ValidationError(
                    "This product requires options before it can be added to the cart."
                )
            attrs["variation"] = variation

        if not ShopConfig.current().base_currency:
            raise serializers.ValidationError("The currency is not set.")

        return attrs

    def save(self):
        request = self.context["request"]
        order = CartService.get_current_order(request, persist=True)
        order.add_item(
            self.context["product"],
            self.validated_data["variation"],
            self.validated_data["quantity"],
        )
        return order


class CartUpdateSerializer(serializers.Serializer):
    quantities = serializers.DictField(child=serializers.CharField(allow_blank=True))

    def validate_quantities(self, quantities):
        order = self.context["order"]
        errors = []
        cleaned = {}

        for item_id, raw in quantities.items():
            item = order.items.filter(pk=item_id).first() if order.pk and str(item_id).isdigit() else None
            if item is None:
                errors.append("This product is not in the Cart.")
                continue

            try:
                quantity = int(raw)
            except (TypeError, ValueError):
                errors.append("The quantity must be a number")
                continue

            if quantity < 0:
                errors.append("The quantity must be at least 0")
                continue
            if quantity > MAX_QUANTITY:
                errors.append("The quantity must be less than 2,147,483,647")
                continue

            if quantity > 0:
                item.quantity = quantity
                validation = item.validate_for_cart()
                if not validation.is_valid():
                    errors.append(validation.first_message())
                    continue

            cleaned[item.pk] = quantity

        if errors:
            raise serializers.ValidationError(errors)
        return cleaned

    def save(self):
        order = self.context["order"]

        for item_id, quantity in self.validated_data["quantities"].items():
            item = order.items.get(pk=item_id)
            if quantity == 0:
                logger.info(f"Removing item {item.pk} from cart", extra={"order_id": order.pk})
                item.delete()
            else:
                item.quantity = quantity
                item.save(update_fields=["quantity"])

        order.update_total()
        return order


class CheckoutSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(
        choices=[], error_messages={"required": "Please select a payment method."}
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    modifiers = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)

    # Only needed when the customer is not logged in
    email = serializers.EmailField(required=False)
    first_name = serializers.CharField(required=False, allow_blank=True, default="")
    surname = serializers.CharField(required=False, allow_blank=True, default="")
    phone = serializers.CharField(required=False, allow_blank=True, default="")
    password = serializers.CharField(required=False, write_only=True, style={"input_type": "password"})
    password_confirm = serializers.CharField(required=False, write_only=True, style={"input_type": "password"})

    def __init__(self, *args, **kwargs):
        from apps.payments.processors import get_supported_methods

        super().__init__(*args, **kwargs)
        self.fields["payment_method"].choices = list(get_supported_methods().items())

    def validate(self, attrs):
        request = self.context["request"]

        if not request.user.is_authenticated:
            if not attrs.get("email"):
                raise serializers.ValidationError({"email": "Please enter your email address."})
            if not attrs.get("password"):
                raise serializers.ValidationError({"password": "Please enter a password."})
            if attrs["password"] != attrs.get("password_confirm"):
                raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
            if get_user_model().objects.filter(email__iexact=attrs["email"]).exists():
                raise serializers.ValidationError(MEMBER_EXISTS_MESSAGE)

        order = CartService.get_current_order(request)
        if order.pk is None or not order.items.exists():
            raise serializers.ValidationError(
                "The cart seems to be empty. If this doesn't seem right, please visit My Account "
                "and view Past Orders to retrieve your order and complete payment."
            )

        validation = order.validate_for_cart()
        if not validation.is_valid():
            raise serializers.ValidationError(validation.messages)

        return attrs

    def save(self):
        return CheckoutService.process(self.context["request"], self.validated_data)


class CheckoutUpdateSerializer(serializers.Serializer):
    is_standing_order = serializers.BooleanField(required=False, default=False)
    name = serializers.CharField(required=False, allow_blank=True)
    frequency = serializers.ChoiceField(choices=StandingOrder.Frequency.choices, required=False)
    start_date = serializers.DateField(required=False)
    modifiers = serializers.DictField(child=serializers.CharField(allow_blank=True), required=False, default=dict)

    def save(self):
        return CheckoutService.update(self.context["request"], self.validated_data)


class RepaySerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(
        choices=[], error_messages={"required": "Please select a payment method."}
    )

    def __init__(self, *args, **kwargs):
        from apps.payments.processors import get_supported_methods

        super().__init__(*args, **kwargs)
        self.fields["payment_method"].choices = list(get_supported_methods().items())

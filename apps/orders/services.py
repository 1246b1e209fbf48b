import logging

from django.contrib.auth import get_user_model, login
from django.db import transaction
from django.urls import reverse
from django.utils import timezone

from apps.accounts.models import current_user
from apps.accounts.receivers import get_customers_group
from apps.shop.models import ShopConfig
from apps.utils.exceptions import BusinessLogicException
from .models import Order, OrderUpdate, StandingOrder

logger = logging.getLogger(__name__)


def _django_request(request):
    # DRF wraps the HttpRequest; auth.login needs the original
    return getattr(request, "_request", request)


class CartService:
    """
    The cart is an Order in Cart status whose id sits in the session.
    """
    SESSION_KEY = "Cart.OrderID"

    @staticmethod
    def get_current_order(request, persist=False):
        order_id = request.session.get(CartService.SESSION_KEY)
        if order_id:
            order = Order.objects.filter(pk=order_id).first()
            if order is not None:
                return order.as_specific()
            request.session.pop(CartService.SESSION_KEY, None)

        order = Order(member=current_user(request))
        if persist:
            order.save()
            request.session[CartService.SESSION_KEY] = order.pk
            logger.info(f"New cart {order.pk}", extra={"order_id": order.pk})
        return order

    @staticmethod
    def touch(request):
        order_id = request.session.get(CartService.SESSION_KEY)
        if order_id:
            Order.objects.filter(pk=order_id, status=Order.Status.CART).update(last_active=timezone.now())

    @staticmethod
    def clear(request):
        request.session.pop(CartService.SESSION_KEY, None)

    @staticmethod
    def cart_link(kind="cart"):
        names = {
            "cart": "cart",
            "checkout": "checkout",
            "account": "account-order-list",
        }
        return reverse(names.get(kind, "cart"))


class CheckoutService:

    @staticmethod
    def _capture(request, order, amount, method, member):
        """
        Hands the order to the payment processor. Gateway errors are logged
        and reported back rather than raised, the order stays Pending.
        """
        from apps.payments.processors import get_processor, PaymentGatewayError

        processor = get_processor(method, request=request)
        order.on_before_payment()

        shop = ShopConfig.current()
        formatted = amount.formatted(shop.base_currency_precision)
        try:
            payment = processor.capture(order, formatted, amount.currency, paid_by=member)
            return payment, None
        except PaymentGatewayError as e:
            logger.warning(f"Payment gateway error: {e}", extra={"order_id": order.pk})
            return None, str(e)

    @staticmethod
    def process(request, data):
        order = CartService.get_current_order(request)
        method = data["payment_method"]

        with transaction.atomic():
            member = current_user(request)
            if member is None:
                member = get_user_model().objects.create_user(
                    email=data["email"],
                    password=data["password"],
                    first_name=data.get("first_name", ""),
                    surname=data.get("surname", ""),
                    phone=data.get("phone", ""),
                )
                member.groups.add(get_customers_group())
                login(_django_request(request), member)
                logger.info(f"Created customer {member.pk} at checkout", extra={"user_id": member.pk})

            order.member = member
            order.status = Order.Status.PENDING
            order.ordered_on = timezone.now()
            order.save()

            if data.get("notes"):
                OrderUpdate.objects.create(order=order, member=member, note=data["notes"], visible=True)

            order.update_modifications({"Modifiers": data.get("modifiers") or {}})

        CartService.clear(request)
        logger.info(f"Order {order.pk} placed by customer {member.pk}", extra={"order_id": order.pk, "user_id": member.pk})

        payment, error = CheckoutService._capture(request, order, order.total(), method, member)
        order.refresh_from_db()
        return order, payment, error

    @staticmethod
    def update(request, data):
        """Recalculate the cart for the checkout page."""
        order = CartService.get_current_order(request, persist=True)

        if data.get("is_standing_order"):
            fields = {
                field: data[field]
                for field in ("name", "frequency", "start_date")
                if data.get(field) is not None
            }
            order = order.as_standing_order(**fields)
        elif isinstance(order, StandingOrder):
            order = order.as_plain_order()

        return order.update_modifications({"Modifiers": data.get("modifiers") or {}})


class RepayService:
    SESSION_KEY = "Repay.OrderID"

    @staticmethod
    def get_viewable_order(user, pk):
        order = Order.objects.filter(pk=pk).first()
        if order is None:
            raise BusinessLogicException("Order does not exist.", code="order_not_found")
        if not order.can_view(user):
            raise BusinessLogicException("You cannot view orders that do not belong to you.", code="order_forbidden")
        return order.as_specific()

    @staticmethod
    def start(request, order):
        request.session[RepayService.SESSION_KEY] = order.pk

    @staticmethod
    def process(request, order, method):
        started_for = request.session.pop(RepayService.SESSION_KEY, None)
        if started_for is not None and started_for != order.pk:
            logger.warning(
                f"Repay was started for order {started_for}, charging order {order.pk}",
                extra={"order_id": order.pk},
            )
        order = Order.objects.get(pk=order.pk)
        return CheckoutService._capture(request, order, order.total_outstanding(), method, request.user)


class StandingOrderService:

    @staticmethod
    def place_due_orders(today=None):
        placed = []
        for standing in StandingOrder.objects.filter(enabled=True, status=Order.Status.STANDING):
            if not standing.should_run(today):
                continue
            try:
                placed.append(standing.place_order())
            except Exception:
                logger.exception(
                    f"Could not place order for standing order {standing.pk}",
                    extra={"standing_order_id": standing.pk},
                )
        return placed

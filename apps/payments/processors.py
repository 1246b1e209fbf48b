import logging
from decimal import Decimal

import razorpay
from django.conf import settings
from django.utils.module_loading import import_string

from apps.utils.exceptions import BusinessLogicException
from .models import Payment, PaymentStatus

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """The gateway rejected the payment or could not be reached."""


class PaymentProcessor:
    method = None

    def __init__(self, request=None):
        self.request = request

    def capture(self, order, amount, currency, paid_by=None):
        raise NotImplementedError

    def create_payment(self, order, amount, currency, paid_by, **fields):
        return Payment.objects.create(
            order=order,
            paid_by=paid_by,
            amount=Decimal(str(amount)),
            currency=currency,
            method=self.method,
            **fields,
        )


class ChequeProcessor(PaymentProcessor):
    """
    Payment arrives offline. The order is confirmed as Pending straight
    away so the customer still gets a receipt.
    """
    method = "Cheque"

    def capture(self, order, amount, currency, paid_by=None):
        payment = self.create_payment(order, amount, currency, paid_by, status=PaymentStatus.PENDING)
        logger.info(f"Cheque payment {payment.pk} recorded", extra={"order_id": order.pk, "payment_id": payment.pk})
        order.on_after_payment(self.request)
        return payment


class RazorpayProcessor(PaymentProcessor):
    method = "Razorpay"

    @staticmethod
    def get_client():
        return razorpay.Client(auth=(settings.RAZORPAY_KEY_ID, settings.RAZORPAY_KEY_SECRET))

    def capture(self, order, amount, currency, paid_by=None):
        client = self.get_client()
        # Razorpay expects the smallest currency unit
        amount_subunits = int(Decimal(str(amount)) * 100)

        try:
            provider_order = client.order.create({
                "amount": amount_subunits,
                "currency": currency,
                "receipt": str(order.pk),
                "payment_capture": 1,
            })
        except Exception as e:
            logger.error(f"Razorpay Order Create Failed: {e}", extra={"order_id": order.pk})
            raise PaymentGatewayError("Payment Gateway Error") from e

        payment = self.create_payment(
            order,
            amount,
            currency,
            paid_by,
            status=PaymentStatus.PENDING,
            gateway_order_id=provider_order["id"],
            gateway_response=provider_order,
        )
        logger.info(
            f"Razorpay order {provider_order['id']} created",
            extra={"order_id": order.pk, "payment_id": payment.pk},
        )
        return payment


def get_supported_methods():
    """{method name: title} for the enabled payment methods."""
    methods = {}
    for name in settings.SHOP_ENABLED_PAYMENT_METHODS:
        name = name.strip()
        config = settings.SHOP_PAYMENT_METHODS.get(name)
        if config:
            methods[name] = config.get("title", name)
    return methods


def get_processor(name, request=None):
    if name not in get_supported_methods():
        raise BusinessLogicException(
            "Sorry, that is not a valid payment method. Please go back and try again",
            code="invalid_payment_method",
        )
    processor_class = import_string(settings.SHOP_PAYMENT_METHODS[name]["processor"])
    return processor_class(request)

import json
from decimal import Decimal
from unittest.mock import patch

import razorpay
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from apps.catalog.models import Product
from apps.orders.models import Order
from apps.shop.models import ShopConfig
from apps.utils.exceptions import BusinessLogicException
from apps.payments.models import Payment, PaymentStatus, WebhookLog
from apps.payments.processors import (
    ChequeProcessor,
    PaymentGatewayError,
    RazorpayProcessor,
    get_processor,
    get_supported_methods,
)
from apps.payments.services import PaymentService

User = get_user_model()


class PaymentTestMixin:

    def setUp(self):
        shop = ShopConfig.current()
        shop.base_currency = "INR"
        shop.base_currency_symbol = "₹"
        shop.save()

        self.customer = User.objects.create_user(email="buyer@example.com", password="secret-pass")
        mug = Product.objects.create(title="Mug", amount=Decimal("250.00"))
        self.order = Order.objects.create(member=self.customer, status=Order.Status.PENDING)
        self.order.add_item(mug)


class ProcessorRegistryTests(TestCase):

    def test_supported_methods(self):
        self.assertEqual(get_supported_methods(), {"Cheque": "Cheque", "Razorpay": "Credit Card (Razorpay)"})

    @override_settings(SHOP_ENABLED_PAYMENT_METHODS=["Cheque"])
    def test_only_enabled_methods(self):
        self.assertEqual(list(get_supported_methods()), ["Cheque"])
        with self.assertRaises(BusinessLogicException):
            get_processor("Razorpay")

    def test_get_processor(self):
        self.assertIsInstance(get_processor("Cheque"), ChequeProcessor)
        self.assertIsInstance(get_processor("Razorpay"), RazorpayProcessor)

    def test_unknown_method(self):
        with self.assertRaises(BusinessLogicException) as ctx:
            get_processor("Bitcoin")
        self.assertEqual(
            ctx.exception.message,
            "Sorry, that is not a valid payment method. Please go back and try again",
        )


class ProcessorTests(PaymentTestMixin, TestCase):

    def test_cheque_confirms_order_unpaid(self):
        payment = ChequeProcessor().capture(self.order, "250.00", "INR", paid_by=self.customer)

        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertEqual(payment.method, "Cheque")
        self.assertEqual(payment.amount, Decimal("250.00"))
        self.order.refresh_from_db()
        self.assertTrue(self.order.redirect_url_hit)
        self.assertEqual(self.order.payment_status, Order.PaymentStatus.UNPAID)
        self.assertEqual(len(mail.outbox), 1)

    def test_cheque_cleared_later_marks_order_paid(self):
        payment = ChequeProcessor().capture(self.order, "250.00", "INR", paid_by=self.customer)

        payment.status = PaymentStatus.SUCCESS
        payment.save()

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PROCESSING)
        self.assertEqual(self.order.payment_status, Order.PaymentStatus.PAID)
        # Receipt already went out with the cheque
        self.assertEqual(len(mail.outbox), 1)

    @patch("apps.payments.processors.razorpay.Client")
    def test_razorpay_creates_gateway_order(self, mock_client):
        mock_client.return_value.order.create.return_value = {"id": "order_ABC", "amount": 25000}

        payment = RazorpayProcessor().capture(self.order, "250.00", "INR", paid_by=self.customer)

        mock_client.return_value.order.create.assert_called_once_with({
            "amount": 25000,
            "currency": "INR",
            "receipt": str(self.order.pk),
            "payment_capture": 1,
        })
        self.assertEqual(payment.gateway_order_id, "order_ABC")
        self.assertEqual(payment.status, PaymentStatus.PENDING)
        self.assertEqual(payment.client_payload()["gateway_order_id"], "order_ABC")
        self.assertEqual(payment.client_payload()["amount"], "₹250.00")

    @patch("apps.payments.processors.razorpay.Client")
    def test_razorpay_errors_are_wrapped(self, mock_client):
        mock_client.return_value.order.create.side_effect = Exception("timeout")

        with self.assertRaises(PaymentGatewayError):
            RazorpayProcessor().capture(self.order, "250.00", "INR")
        self.assertFalse(Payment.objects.exists())


class WebhookTests(PaymentTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.client = APIClient()
        self.payment = Payment.objects.create(
            order=self.order,
            paid_by=self.customer,
            amount=Decimal("250.00"),
            currency="INR",
            method="Razorpay",
            gateway_order_id="order_ABC",
        )

    def _event(self, event="payment.captured", payment_id="pay_123", order_id="order_ABC"):
        return {
            "event": event,
            "payload": {
                "payment": {
                    "entity": {
                        "id": payment_id,
                        "order_id": order_id,
                        "amount": 25000,
                        "currency": "INR",
                        "error_description": "Card declined" if event == "payment.failed" else None,
                    }
                }
            },
        }

    def test_captured_marks_payment_and_order(self):
        PaymentService.process_webhook(self._event())

        self.payment.refresh_from_db()
        self.order.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.SUCCESS)
        self.assertEqual(self.payment.transaction_id, "pay_123")
        self.assertEqual(self.order.status, Order.Status.PROCESSING)
        self.assertTrue(self.order.is_paid())
        self.assertEqual(len(mail.outbox), 1)

    def test_failed_marks_payment_failure(self):
        PaymentService.process_webhook(self._event(event="payment.failed"))

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.FAILURE)
        self.assertEqual(self.payment.error_message, "Card declined")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PENDING)

    def test_duplicate_events_are_skipped(self):
        PaymentService.process_webhook(self._event())
        PaymentService.process_webhook(self._event())

        self.assertEqual(WebhookLog.objects.count(), 1)
        self.assertEqual(len(mail.outbox), 1)

    def test_failure_after_success_is_ignored(self):
        PaymentService.process_webhook(self._event())
        PaymentService.process_webhook(self._event(event="payment.failed", payment_id="pay_124"))

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.SUCCESS)

    def test_unknown_gateway_order(self):
        with self.assertLogs("apps.payments.services", level="ERROR"):
            self.assertIsNone(PaymentService.process_webhook(self._event(order_id="order_UNKNOWN")))
        self.assertTrue(WebhookLog.objects.get().is_processed)

    @patch("apps.payments.services.RazorpayProcessor.get_client")
    def test_webhook_endpoint(self, mock_get_client):
        body = json.dumps(self._event())
        response = self.client.post(
            "/api/v1/payments/webhook/",
            data=body,
            content_type="application/json",
            HTTP_X_RAZORPAY_SIGNATURE="valid-signature",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_get_client.return_value.utility.verify_webhook_signature.assert_called_once()
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.SUCCESS)

    @patch("apps.payments.services.RazorpayProcessor.get_client")
    def test_webhook_rejects_bad_signature(self, mock_get_client):
        mock_get_client.return_value.utility.verify_webhook_signature.side_effect = (
            razorpay.errors.SignatureVerificationError("bad")
        )
        response = self.client.post(
            "/api/v1/payments/webhook/",
            data=json.dumps(self._event()),
            content_type="application/json",
            HTTP_X_RAZORPAY_SIGNATURE="forged",
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, PaymentStatus.PENDING)

    def test_webhook_requires_signature(self):
        response = self.client.post(
            "/api/v1/payments/webhook/", data=json.dumps(self._event()), content_type="application/json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

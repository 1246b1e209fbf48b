# apps/utils/tests.py
import json
import logging
from decimal import Decimal

from django.test import TestCase, SimpleTestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.utils.exceptions import BusinessLogicException, custom_exception_handler
from apps.utils.logging import JSONFormatter
from apps.utils.price import Price
from apps.utils.validation import ValidationResult


class PriceTests(SimpleTestCase):

    def test_amount_is_rounded_half_up(self):
        self.assertEqual(Price("10.005", "NZD", "$").amount, Decimal("10.01"))
        self.assertEqual(Price("10.004", "NZD", "$").amount, Decimal("10.00"))

    def test_missing_amount_is_zero(self):
        self.assertEqual(Price(None).amount, Decimal("0.00"))
        self.assertEqual(Price("").amount, Decimal("0.00"))

    def test_nice(self):
        self.assertEqual(Price("5", "NZD", "$").nice(), "$5.00")
        self.assertEqual(Price("-5", "NZD", "$").nice(), "- $5.00")

    def test_formatted_for_gateways(self):
        self.assertEqual(Price("12.5", "NZD", "$").formatted(2), "12.50")
        self.assertEqual(Price("12.5", "JPY", "¥").formatted(0), "12")

    def test_arithmetic_keeps_currency(self):
        total = Price("2.50", "NZD", "$") * 3 + Price("1", "NZD", "$")
        self.assertEqual(total, Price("8.50", "NZD", "$"))
        self.assertEqual((total - 10).nice(), "- $1.50")


class ValidationResultTests(SimpleTestCase):

    def test_empty_result_is_valid(self):
        result = ValidationResult()
        self.assertTrue(result.is_valid())
        self.assertTrue(result)
        self.assertEqual(result.first_message(), "")

    def test_errors_and_codes(self):
        result = ValidationResult().add_error("Out of stock", "ProductExistsError")
        result.add_error("Bad quantity", "QuantityError")

        self.assertFalse(result.is_valid())
        self.assertEqual(result.messages, ["Out of stock", "Bad quantity"])
        self.assertTrue(result.has_code("QuantityError"))
        self.assertEqual(result.first_message(), "Out of stock")

    def test_results_merge(self):
        result = ValidationResult()
        result += ValidationResult().add_error("Nope", "X")
        self.assertEqual(result.codes, ["X"])


class ExceptionHandlerTests(SimpleTestCase):

    def test_business_logic_exception_is_bad_request(self):
        response = custom_exception_handler(BusinessLogicException("Order does not exist.", "order_not_found"), {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {"error": "Order does not exist.", "code": "order_not_found"})

    def test_missing_object_is_not_found(self):
        from apps.orders.models import Order

        response = custom_exception_handler(Order.DoesNotExist("Order matching query does not exist."), {})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "not_found")

    def test_unhandled_exception_is_server_error(self):
        with self.assertLogs("apps.utils.exceptions", level="ERROR"):
            response = custom_exception_handler(RuntimeError("boom"), {})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["code"], "server_error")


class JSONFormatterTests(SimpleTestCase):

    def _record(self, msg, **extra):
        record = logging.LogRecord("apps.test", logging.INFO, __file__, 1, msg, None, None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_sensitive_keys_are_redacted(self):
        line = json.loads(JSONFormatter().format(self._record({"email": "a@b.com", "password": "hunter2"})))
        self.assertIn("***REDACTED***", line["msg"])
        self.assertNotIn("hunter2", line["msg"])

    def test_context_fields_are_included(self):
        line = json.loads(JSONFormatter().format(self._record("Order placed", order_id=7, user_id=3)))
        self.assertEqual(line["order_id"], 7)
        self.assertEqual(line["user_id"], 3)
        self.assertEqual(line["lvl"], "INFO")


class UtilsEndpointTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_health_check(self):
        response = self.client.get("/api/v1/utils/health/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["components"]["db"], "ok")

    def test_global_config_exposes_currency(self):
        from apps.shop.models import ShopConfig

        shop = ShopConfig.current()
        shop.base_currency = "NZD"
        shop.save()

        response = self.client.get("/api/v1/utils/config/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["base_currency"], "NZD")
        self.assertEqual(response.data["base_currency_symbol"], "$")
        self.assertIn("base_delivery_fee", response.data)

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings

from apps.catalog.models import Product
from apps.emails.emails import ProcessedEmail, ReceiptEmail
from apps.orders.models import Order
from apps.shop.models import ShopConfig

User = get_user_model()


class ProcessedEmailTests(TestCase):

    def test_tables_are_unwrapped(self):
        email = ProcessedEmail()
        html = email.clean_html("<p>\n<table><tr><td>x</td></tr></table>\n</p>&copy 2026")
        self.assertEqual(html, "<table><tr><td>x</td></tr></table>2026")


@override_settings(SHOP_NAME="Commonsense", SHOP_ADMIN_EMAIL="", SHOP_DOMAIN="shop.example.com")
class ReceiptEmailTests(TestCase):

    def setUp(self):
        self.shop = ShopConfig.current()
        self.shop.base_currency = "NZD"
        self.shop.receipt_body = "<p>Thanks for shopping with us.</p>"
        self.shop.email_signature = "<p>The Team</p>"
        self.shop.save()

        self.customer = User.objects.create_user(email="jane@example.com", password="pw", first_name="Jane")
        self.order = Order.objects.create(member=self.customer, status=Order.Status.PENDING)
        self.order.add_item(Product.objects.create(title="Blue Mug", amount=Decimal("10.00")), quantity=2)

    def test_receipt(self):
        ReceiptEmail(self.customer, self.order).send()

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.to, ["jane@example.com"])
        self.assertEqual(message.subject, f"Your order receipt - Order #{self.order.pk}")
        self.assertEqual(message.from_email, "no-reply@shop.example.com")
        self.assertIn("Blue Mug", message.body)
        self.assertIn("Thanks for shopping with us.", message.body)

        html, mimetype = message.alternatives[0]
        self.assertEqual(mimetype, "text/html")
        self.assertIn("<style>", html)
        self.assertIn("$20.00", html)
        self.assertIn("The Team", html)

    def test_sender_fallbacks(self):
        with self.settings(SHOP_ADMIN_EMAIL="admin@shop.example.com"):
            self.assertEqual(ReceiptEmail(self.customer, self.order).from_email, "admin@shop.example.com")

            self.shop.receipt_from = "orders@shop.example.com"
            self.shop.save()
            self.assertEqual(ReceiptEmail(self.customer, self.order).from_email, "orders@shop.example.com")

    def test_standing_order_subject(self):
        standing = self.order.as_standing_order(name="Weekly mugs")
        email = ReceiptEmail(self.customer, standing)
        self.assertEqual(email.subject, "Your Standing Order from Commonsense - Weekly mugs")

        # A plain Order instance for the same row is recognised too
        email = ReceiptEmail(self.customer, Order.objects.get(pk=standing.pk))
        self.assertEqual(email.subject, "Your Standing Order from Commonsense - Weekly mugs")

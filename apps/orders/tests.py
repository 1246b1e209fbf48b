# apps/orders/tests.py
from datetime import timedelta
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from apps.accounts.receivers import get_customers_group
from apps.catalog.models import Product
from apps.payments.models import Payment, PaymentStatus
from apps.shop.models import ShopConfig
from apps.utils.exceptions import BusinessLogicException
from apps.orders.models import Order, Item, ItemOption, OrderUpdate, StandingOrder
from apps.orders.services import RepayService, StandingOrderService
from apps.orders.tasks import delete_abandoned_carts, place_standing_orders

User = get_user_model()


def set_currency(code="NZD", symbol="$"):
    shop = ShopConfig.current()
    shop.base_currency = code
    shop.base_currency_symbol = symbol
    shop.save()
    return shop


def make_customer(email="jane@example.com", password="secret-pass", **extra):
    customer = User.objects.create_user(email=email, password=password, **extra)
    customer.groups.add(get_customers_group())
    return customer


class OrderTotalsTests(TestCase):

    def setUp(self):
        set_currency()
        self.customer = make_customer()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))
        self.order = Order.objects.create(member=self.customer)

    def test_new_order_snapshots_currency(self):
        self.assertEqual(self.order.base_currency, "NZD")
        self.assertEqual(self.order.base_currency_symbol, "$")
        self.assertIsNotNone(self.order.last_active)
        self.assertEqual(self.order.status, Order.Status.CART)

    def test_add_item_merges_identical_items(self):
        self.order.add_item(self.mug, quantity=2)
        self.order.add_item(self.mug, quantity=1)

        self.assertEqual(self.order.items.count(), 1)
        self.assertEqual(self.order.item_count(), 3)
        self.assertEqual(self.order.total().nice(), "$30.00")

    def test_price_change_starts_a_new_line(self):
        self.order.add_item(self.mug)
        self.mug.amount = Decimal("12.00")
        self.mug.save()
        self.order.add_item(self.mug)

        self.assertEqual(self.order.items.count(), 2)
        self.assertEqual(self.order.total().nice(), "$22.00")

    def test_item_options_are_charged(self):
        item = self.order.add_item(self.mug, options=[{"description": "Gift wrap", "price": "2.50"}])
        self.order.add_item(self.mug, options=[{"description": "Gift wrap", "price": "2.50"}])

        item.refresh_from_db()
        self.assertEqual(item.quantity, 2)
        self.assertEqual(item.unit_amount().nice(), "$12.50")
        self.assertEqual(item.summary_of_options(), "Gift wrap")
        self.assertEqual(self.order.total().nice(), "$25.00")

    @override_settings(BASE_DELIVERY_FEE=Decimal("5.00"), SHOP_TAX_RATE=Decimal("0.15"))
    def test_modifications(self):
        self.order.add_item(self.mug, quantity=2)
        self.order.update_modifications({"Modifiers": {}})

        descriptions = list(self.order.modifications.values_list("description", flat=True))
        self.assertEqual(descriptions, ["Tax (15%)", "Delivery"])
        self.assertEqual(self.order.sub_total().nice(), "$23.00")
        self.assertEqual(self.order.total().nice(), "$28.00")
        self.assertEqual(self.order.cart_total_price().nice(), "$20.00")

    @override_settings(BASE_DELIVERY_FEE=Decimal("5.00"), SHOP_TAX_RATE=Decimal("0"))
    def test_pickup_skips_delivery(self):
        self.order.add_item(self.mug)
        self.order.update_modifications({"Modifiers": {"FlatRateShipping": "pickup"}})

        self.assertFalse(self.order.modifications.exists())
        self.assertEqual(self.order.total().nice(), "$10.00")

    def test_recalculating_modifications_replaces_them(self):
        self.order.add_item(self.mug)
        self.order.update_modifications({"Modifiers": {}})
        self.order.update_modifications({"Modifiers": {}})
        self.assertEqual(self.order.modifications.filter(modifier="FlatRateShipping").count(), 1)

    def test_total_paid_counts_successful_payments(self):
        self.order.add_item(self.mug)
        Payment.objects.create(order=self.order, amount=Decimal("4"), currency="NZD", method="Cheque",
                               status=PaymentStatus.SUCCESS)
        Payment.objects.create(order=self.order, amount=Decimal("100"), currency="NZD", method="Cheque",
                               status=PaymentStatus.FAILURE)

        self.assertEqual(self.order.total_paid().nice(), "$4.00")
        self.assertEqual(self.order.total_outstanding().nice(), "$6.00")
        self.assertFalse(self.order.is_paid())


class OrderValidationTests(TestCase):

    def setUp(self):
        set_currency()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))
        self.order = Order.objects.create()

    def test_empty_order(self):
        result = self.order.validate_for_cart()
        self.assertTrue(result.has_code("ItemExistsError"))

    def test_missing_currency(self):
        self.order.base_currency = ""
        self.assertTrue(self.order.validate_for_cart().has_code("BaseCurrencyError"))

    def test_unpublished_product(self):
        item = self.order.add_item(self.mug)
        self.mug.is_published = False
        self.mug.save()
        item.refresh_from_db()

        self.assertTrue(item.validate_for_cart().has_code("ProductExistsError"))
        result = self.order.validate_for_cart()
        self.assertEqual(result.codes, ["ItemValidationError"])

    def test_quantity_out_of_range(self):
        item = self.order.add_item(self.mug)
        item.quantity = 0
        self.assertTrue(item.validate().has_code("QuantityError"))


class OrderLifecycleTests(TestCase):

    def setUp(self):
        set_currency()
        self.customer = make_customer()
        self.admin = User.objects.create_superuser(email="admin@example.com", password="admin-pass")
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))

    def test_adding_past_the_quantity_limit_is_rejected(self):
        sticker = Product.objects.create(title="Sticker", amount=Decimal("1.00"))
        order = Order.objects.create(member=self.customer)
        order.add_item(sticker, quantity=2147483000)

        with self.assertRaises(BusinessLogicException):
            order.add_item(sticker, quantity=1000)

        item = order.items.get()
        self.assertEqual(item.quantity, 2147483000)
        self.assertTrue(item.validate_for_cart().is_valid())

    def _placed_order(self):
        order = Order.objects.create(member=self.customer)
        order.add_item(self.mug)
        order.status = Order.Status.PENDING
        order.ordered_on = timezone.now()
        order.save()
        return order

    def test_on_after_payment_runs_once(self):
        order = self._placed_order()

        self.assertTrue(order.on_after_payment())
        self.assertFalse(order.on_after_payment())

        order.refresh_from_db()
        self.assertTrue(order.redirect_url_hit)
        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertEqual(order.payment_status, Order.PaymentStatus.UNPAID)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, f"Your order receipt - Order #{order.pk}")

    def test_paid_order_moves_to_processing(self):
        order = self._placed_order()
        Payment.objects.create(order=order, amount=Decimal("10"), currency="NZD", method="Cheque",
                               status=PaymentStatus.SUCCESS)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.PROCESSING)
        self.assertEqual(order.payment_status, Order.PaymentStatus.PAID)

    def test_on_before_payment_resets_flag(self):
        order = self._placed_order()
        order.on_after_payment()
        order.on_before_payment()
        order.refresh_from_db()
        self.assertFalse(order.redirect_url_hit)

    def test_permissions(self):
        order = self._placed_order()
        stranger = make_customer(email="other@example.com")

        self.assertTrue(order.can_view(self.customer))
        self.assertFalse(order.can_view(stranger))
        self.assertTrue(order.can_view(self.admin))
        self.assertFalse(order.can_edit(self.customer))
        self.assertTrue(order.can_edit(self.admin))
        self.assertFalse(order.can_create(self.admin))

    def test_delete_rules(self):
        cart = Order.objects.create(member=self.customer)
        cart.add_item(self.mug)
        placed = self._placed_order()

        self.assertEqual(placed.delete(user=self.customer), (0, {}))
        self.assertTrue(Order.objects.filter(pk=placed.pk).exists())

        cart.delete(user=self.customer)
        self.assertFalse(Order.objects.filter(pk=cart.pk).exists())
        self.assertFalse(Item.objects.filter(order_id=cart.pk).exists())

        placed.delete(user=self.admin)
        self.assertFalse(Order.objects.filter(pk=placed.pk).exists())

    def test_order_updates(self):
        order = self._placed_order()
        update = OrderUpdate.objects.create(order=order, member=self.admin, status="Dispatched",
                                            note="On its way", visible=True)
        OrderUpdate.objects.create(order=order, member=self.admin, note="Internal note")

        order.refresh_from_db()
        self.assertEqual(order.status, Order.Status.DISPATCHED)
        self.assertEqual(list(order.customer_updates()), [update])
        self.assertEqual(update.delete(), (0, {}))
        self.assertEqual(update.visible_summary(), "True")

    def test_summary_of_payment_status(self):
        order = self._placed_order()
        first = Payment.objects.create(order=order, amount=Decimal("10"), method="Cheque")
        self.assertEqual(order.summary_of_payment_status(), "Payment Pending")

        second = Payment.objects.create(order=order, amount=Decimal("10"), method="Cheque",
                                        status=PaymentStatus.FAILURE)
        self.assertEqual(
            order.summary_of_payment_status(),
            f"Payment #{first.pk} Pending, Payment #{second.pk} Failure",
        )

    @override_settings(SHOP_ORDER_FIRST_ID=1000)
    def test_first_order_id(self):
        order = Order.objects.create()
        self.assertEqual(order.pk, 1000)


class AbandonedCartTests(TestCase):

    def setUp(self):
        set_currency()
        self.customer = make_customer()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))
        old = timezone.now() - timedelta(hours=3)

        self.stale = Order.objects.create(last_active=old)
        self.stale.add_item(self.mug)
        self.stale_member_cart = Order.objects.create(member=self.customer, last_active=old)
        self.fresh = Order.objects.create()
        self.placed = Order.objects.create(member=self.customer, status=Order.Status.PENDING, last_active=old)

    def test_delete_abandoned(self):
        deleted = Order.delete_abandoned()

        self.assertEqual(deleted, 2)
        self.assertEqual(
            set(Order.objects.values_list("pk", flat=True)),
            {self.fresh.pk, self.placed.pk},
        )

    def test_carts_with_payments_are_kept(self):
        Payment.objects.create(order=self.stale, amount=Decimal("10"), method="Razorpay")
        Order.delete_abandoned()
        self.assertTrue(Order.objects.filter(pk=self.stale.pk).exists())

    def test_timeout_follows_shop_config(self):
        shop = ShopConfig.current()
        shop.cart_timeout = 1
        shop.cart_timeout_unit = ShopConfig.TimeoutUnit.DAY
        shop.save()

        self.assertEqual(Order.delete_abandoned(), 0)

    def test_task_and_command(self):
        self.assertEqual(delete_abandoned_carts(), 2)

        Order.objects.create(last_active=timezone.now() - timedelta(hours=5))
        call_command("delete_abandoned_carts", stdout=StringIO())
        self.assertEqual(Order.objects.filter(status=Order.Status.CART).count(), 1)


class StandingOrderTests(TestCase):

    def setUp(self):
        set_currency()
        self.customer = make_customer()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))
        self.today = timezone.localdate()

        cart = Order.objects.create(member=self.customer)
        item = cart.add_item(self.mug, quantity=2)
        ItemOption.objects.create(item=item, description="Gift wrap", price=Decimal("1.00"))
        self.standing = cart.as_standing_order(
            name="Weekly mugs",
            frequency=StandingOrder.Frequency.WEEKLY,
            start_date=self.today - timedelta(days=14),
        )

    def _confirm(self):
        self.standing.status = Order.Status.STANDING
        self.standing.save()

    def test_cast_keeps_the_same_row(self):
        order = Order.objects.get(pk=self.standing.pk)

        self.assertTrue(order.is_standing_order())
        self.assertIsInstance(order.as_specific(), StandingOrder)
        self.assertEqual(self.standing.cart_name(), "Weekly mugs")
        self.assertEqual(self.standing.items.count(), 1)
        self.assertEqual(self.standing.payment_status, Order.PaymentStatus.STANDING)

    def test_cast_back_to_plain_order(self):
        order = self.standing.as_plain_order()

        self.assertNotIsInstance(order, StandingOrder)
        self.assertFalse(order.is_standing_order())
        self.assertEqual(order.items.count(), 1)
        self.assertFalse(StandingOrder.objects.exists())

    def test_cart_name_defaults_to_id(self):
        self.standing.name = ""
        self.assertEqual(self.standing.cart_name(), f"Standing Order #{self.standing.pk}")

    def test_items_use_current_price(self):
        self.mug.amount = Decimal("12.00")
        self.mug.save()
        item = self.standing.items.get()
        self.assertEqual(item.amount().nice(), "$12.00")

    def test_should_run(self):
        self.assertTrue(self.standing.should_run(self.today))

    def test_should_not_run_before_start(self):
        self.standing.start_date = self.today + timedelta(days=1)
        self.assertFalse(self.standing.should_run(self.today))

    def test_missed_window(self):
        self.standing.start_date = self.today - timedelta(days=8)
        self.assertFalse(self.standing.should_run(self.today))

    def test_fortnightly(self):
        self.standing.frequency = StandingOrder.Frequency.FORTNIGHTLY
        self.standing.start_date = self.today - timedelta(days=7)
        self.assertFalse(self.standing.should_run(self.today))

        self.standing.start_date = self.today - timedelta(days=28)
        self.assertTrue(self.standing.should_run(self.today))

    def test_no_period(self):
        self.standing.start_date = None
        self.assertIsNone(self.standing.period())
        self.assertFalse(self.standing.should_run(self.today))

    def test_place_order(self):
        self.mug.amount = Decimal("12.00")
        self.mug.save()

        order = self.standing.place_order()

        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertEqual(order.member, self.customer)
        self.assertEqual(order.standing_order_id, self.standing.pk)
        self.assertIsNotNone(order.ordered_on)
        item = order.items.get()
        self.assertEqual(item.price, Decimal("12.00"))
        self.assertEqual(item.quantity, 2)
        self.assertEqual(list(item.item_options.values_list("description", flat=True)), ["Gift wrap"])
        self.assertEqual(order.total().nice(), "$26.00")

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["jane@example.com"])

        # Already placed today
        self.assertFalse(self.standing.should_run(self.today))

    def test_place_due_orders_only_runs_confirmed_and_enabled(self):
        self.assertEqual(StandingOrderService.place_due_orders(self.today), [])

        self._confirm()
        placed = StandingOrderService.place_due_orders(self.today)
        self.assertEqual(len(placed), 1)

        # Second run on the same day places nothing
        self.assertEqual(StandingOrderService.place_due_orders(self.today), [])

    def test_disabled_standing_orders_are_skipped(self):
        self._confirm()
        self.standing.enabled = False
        with self.assertLogs("apps.orders.models.standing", level="INFO") as logs:
            self.standing.save()
        self.assertIn("Standing order disabled", logs.output[0])

        self.assertEqual(place_standing_orders(), [])

    def test_failures_are_logged_not_raised(self):
        self._confirm()
        with patch.object(StandingOrder, "place_order", side_effect=RuntimeError("boom")):
            with self.assertLogs("apps.orders.services", level="ERROR"):
                self.assertEqual(StandingOrderService.place_due_orders(self.today), [])


class CartApiTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        set_currency()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))

    def _add(self, product=None, quantity=1):
        url = reverse("product-add-to-cart", args=[(product or self.mug).pk])
        return self.client.post(url, {"quantity": quantity}, format="json")

    def test_empty_cart(self):
        response = self.client.get(reverse("cart"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data["id"])
        self.assertEqual(response.data["items"], [])
        self.assertFalse(Order.objects.exists())

    def test_cart_lives_in_the_session(self):
        self._add(quantity=2)
        response = self.client.get(reverse("cart"))

        self.assertEqual(response.data["item_count"], 2)
        self.assertEqual(response.data["total"], "$20.00")
        self.assertEqual(self.client.session["Cart.OrderID"], response.data["id"])

    def test_update_quantities(self):
        self._add(quantity=2)
        item = Item.objects.get()

        response = self.client.post(reverse("cart"), {"quantities": {str(item.pk): "5"}}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["item_count"], 5)

        response = self.client.post(reverse("cart"), {"quantities": {str(item.pk): "0"}}, format="json")
        self.assertEqual(response.data["items"], [])

    def test_update_rejects_bad_input(self):
        self._add()
        item = Item.objects.get()

        response = self.client.post(reverse("cart"), {"quantities": {str(item.pk): "abc"}}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("The quantity must be a number", response.data["quantities"])

        response = self.client.post(reverse("cart"), {"quantities": {"999": "1"}}, format="json")
        self.assertIn("This product is not in the Cart.", response.data["quantities"])

    def test_requests_keep_the_cart_active(self):
        self._add()
        order = Order.objects.get()
        Order.objects.filter(pk=order.pk).update(last_active=timezone.now() - timedelta(days=1))

        self.client.get(reverse("cart"))
        order.refresh_from_db()
        self.assertGreater(order.last_active, timezone.now() - timedelta(minutes=5))

    def test_checkout_update_casts_to_standing_order(self):
        self._add()
        response = self.client.post(reverse("checkout-update"), {
            "is_standing_order": True,
            "name": "Weekly mugs",
            "frequency": "Fortnightly",
            "start_date": "2026-11-02",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["is_standing_order"])
        self.assertEqual(response.data["cart_name"], "Weekly mugs")
        self.assertEqual(response.data["standing_order"]["frequency"], "Fortnightly")

        response = self.client.post(reverse("checkout-update"), {"is_standing_order": False}, format="json")
        self.assertFalse(response.data["is_standing_order"])
        self.assertEqual(response.data["cart_name"], "Cart")
        self.assertEqual(response.data["item_count"], 1)

    @override_settings(BASE_DELIVERY_FEE=Decimal("4.00"))
    def test_checkout_update_applies_modifiers(self):
        self._add()
        response = self.client.post(reverse("checkout-update"), {"modifiers": {"FlatRateShipping": "delivery"}},
                                    format="json")
        self.assertEqual(response.data["total"], "$14.00")

        response = self.client.post(reverse("checkout-update"), {"modifiers": {"FlatRateShipping": "pickup"}},
                                    format="json")
        self.assertEqual(response.data["total"], "$10.00")


class CheckoutApiTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        set_currency()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))

    def _add(self):
        url = reverse("product-add-to-cart", args=[self.mug.pk])
        self.client.post(url, {"quantity": 1}, format="json")

    def _guest_details(self, **extra):
        data = {
            "payment_method": "Cheque",
            "email": "new@example.com",
            "first_name": "New",
            "surname": "Customer",
            "password": "pass-1234",
            "password_confirm": "pass-1234",
        }
        data.update(extra)
        return data

    def test_guest_checkout_with_cheque(self):
        self._add()
        response = self.client.post(reverse("checkout"), self._guest_details(notes="Leave at door"), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        order = Order.objects.get()
        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertEqual(order.member.email, "new@example.com")
        self.assertTrue(order.member.groups.filter(name="Customers").exists())
        self.assertTrue(order.redirect_url_hit)
        self.assertEqual(response.data["payment"]["method"], "Cheque")
        self.assertEqual(response.data["redirect_url"], order.link())
        self.assertEqual(order.updates.get().note, "Leave at door")

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["new@example.com"])

        # Cart was cleared and the new customer is logged in
        self.assertNotIn("Cart.OrderID", self.client.session)
        response = self.client.get(reverse("account-order-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_existing_email_must_log_in(self):
        make_customer(email="new@example.com")
        self._add()
        response = self.client.post(reverse("checkout"), self._guest_details(), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("a member already exists with that email address", str(response.data))

    def test_empty_cart(self):
        response = self.client.post(reverse("checkout"), self._guest_details(), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("The cart seems to be empty", str(response.data))

    def test_unknown_payment_method(self):
        self._add()
        response = self.client.post(reverse("checkout"), self._guest_details(payment_method="Bitcoin"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("payment_method", response.data)

    def test_unavailable_items_block_checkout(self):
        self._add()
        self.mug.is_published = False
        self.mug.save()

        response = self.client.post(reverse("checkout"), self._guest_details(), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("no longer available", str(response.data))

    @patch("apps.payments.processors.razorpay.Client")
    def test_logged_in_checkout_with_razorpay(self, mock_client):
        mock_client.return_value.order.create.return_value = {"id": "order_TEST123", "amount": 1000}
        customer = make_customer()
        self.client.force_login(customer)
        self._add()

        response = self.client.post(reverse("checkout"), {"payment_method": "Razorpay"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["payment"]["gateway_order_id"], "order_TEST123")
        mock_client.return_value.order.create.assert_called_once()
        self.assertEqual(mock_client.return_value.order.create.call_args[0][0]["amount"], 1000)

        order = Order.objects.get()
        self.assertEqual(order.member, customer)
        self.assertEqual(order.status, Order.Status.PENDING)
        # No receipt until the gateway confirms
        self.assertEqual(len(mail.outbox), 0)

    @patch("apps.payments.processors.razorpay.Client")
    def test_gateway_error_leaves_order_pending(self, mock_client):
        mock_client.return_value.order.create.side_effect = Exception("gateway down")
        self.client.force_login(make_customer())
        self._add()

        response = self.client.post(reverse("checkout"), {"payment_method": "Razorpay"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["error"], "Payment Gateway Error")
        self.assertIsNone(response.data["payment"])
        self.assertEqual(Order.objects.get().status, Order.Status.PENDING)

    def test_standing_order_checkout(self):
        customer = make_customer()
        self.client.force_login(customer)
        self._add()
        self.client.post(reverse("checkout-update"), {
            "is_standing_order": True, "name": "Weekly mugs", "start_date": "2026-11-02",
        }, format="json")

        response = self.client.post(reverse("checkout"), {"payment_method": "Cheque"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        standing = StandingOrder.objects.get()
        self.assertEqual(standing.status, Order.Status.STANDING)
        self.assertEqual(standing.payment_status, Order.PaymentStatus.STANDING)
        self.assertEqual(mail.outbox[0].subject, "Your Standing Order from SwipeShop - Weekly mugs")


class AccountOrderApiTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        set_currency()
        self.customer = make_customer()
        self.other = make_customer(email="other@example.com")
        mug = Product.objects.create(title="Mug", amount=Decimal("10.00"))

        self.order = Order.objects.create(member=self.customer, status=Order.Status.PENDING)
        self.order.add_item(mug)
        self.others_order = Order.objects.create(member=self.other, status=Order.Status.PENDING)
        self.client.force_login(self.customer)

    def test_list_own_orders(self):
        response = self.client.get(reverse("account-order-list"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o["id"] for o in response.data], [self.order.pk])

    def test_detail(self):
        response = self.client.get(reverse("account-order-detail", args=[self.order.pk]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_outstanding"], "$10.00")

    def test_other_customers_orders_are_forbidden(self):
        response = self.client.get(reverse("account-order-detail", args=[self.others_order.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["detail"], "You cannot view orders that do not belong to you.")

    def test_missing_order(self):
        response = self.client.get(reverse("account-order-detail", args=[99999]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["detail"], "Order does not exist.")

    def test_anonymous_cannot_list(self):
        self.client.logout()
        response = self.client.get(reverse("account-order-list"))
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_repay(self):
        url = reverse("account-order-repay", args=[self.order.pk])
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_outstanding"], "$10.00")
        self.assertIn("Cheque", response.data["payment_methods"])
        self.assertEqual(self.client.session["Repay.OrderID"], self.order.pk)

        response = self.client.post(url, {"payment_method": "Cheque"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment = Payment.objects.get()
        self.assertEqual(payment.order_id, self.order.pk)
        self.assertEqual(payment.amount, Decimal("10"))
        self.assertEqual(payment.paid_by, self.customer)

    def test_repay_charges_the_order_in_the_url(self):
        second = Order.objects.create(member=self.customer, status=Order.Status.PENDING)
        second.add_item(Product.objects.create(title="Teapot", amount=Decimal("25.00")))

        self.client.get(reverse("account-order-repay", args=[self.order.pk]))
        response = self.client.post(
            reverse("account-order-repay", args=[second.pk]), {"payment_method": "Cheque"}, format="json"
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        payment = Payment.objects.get()
        self.assertEqual(payment.order_id, second.pk)
        self.assertEqual(payment.amount, Decimal("25"))
        self.assertNotIn("Repay.OrderID", self.client.session)

    def test_repay_service_checks_ownership(self):
        with self.assertRaises(BusinessLogicException):
            RepayService.get_viewable_order(self.customer, self.others_order.pk)


class OrderAdminTests(TestCase):

    def setUp(self):
        set_currency()
        self.admin = User.objects.create_superuser(email="admin@example.com", password="admin-pass")
        self.customer = make_customer(first_name="Jane", surname="Doe")
        self.client.force_login(self.admin)

        self.paid = Order.objects.create(member=self.customer, status=Order.Status.PENDING,
                                         ordered_on=timezone.now())
        self.paid.add_item(Product.objects.create(title="Mug", amount=Decimal("10.00")))
        Payment.objects.create(order=self.paid, amount=Decimal("10"), method="Cheque")
        self.cart = Order.objects.create(member=self.customer)

    def test_changelist_only_shows_orders_with_payments(self):
        response = self.client.get(reverse("admin:orders_order_changelist"))
        self.assertEqual(response.status_code, 200)
        pks = [obj.pk for obj in response.context["cl"].result_list]
        self.assertEqual(pks, [self.paid.pk])

    def test_changelist_shows_orders_placed_from_standing_orders(self):
        self.cart.add_item(Product.objects.create(title="Teapot", amount=Decimal("25.00")))
        standing = self.cart.as_standing_order(
            name="Weekly tea", frequency=StandingOrder.Frequency.WEEKLY, start_date=timezone.localdate(),
        )
        standing.status = Order.Status.STANDING
        standing.save()
        placed = standing.place_order()

        response = self.client.get(reverse("admin:orders_order_changelist"))
        pks = {obj.pk for obj in response.context["cl"].result_list}
        self.assertEqual(pks, {self.paid.pk, placed.pk})

    def test_export_as_csv(self):
        response = self.client.post(reverse("admin:orders_order_changelist"), {
            "action": "export_as_csv",
            "_selected_action": [self.paid.pk],
        })
        self.assertEqual(response["Content-Type"], "text/csv")
        lines = response.content.decode().strip().splitlines()
        self.assertEqual(lines[0], "Order No,Ordered On,Customer,Email,Total,Status")
        self.assertIn("Jane Doe,jane@example.com,$10.00,Pending", lines[1])

    def test_no_add(self):
        response = self.client.get(reverse("admin:orders_order_add"))
        self.assertEqual(response.status_code, 403)


class CartLinkTests(TestCase):

    def test_links(self):
        from apps.orders.services import CartService

        self.assertEqual(CartService.cart_link("cart"), "/api/v1/cart/")
        self.assertEqual(CartService.cart_link("checkout"), "/api/v1/checkout/")
        self.assertEqual(CartService.cart_link("account"), "/api/v1/account/orders/")
        self.assertEqual(CartService.cart_link("unknown"), "/api/v1/cart/")

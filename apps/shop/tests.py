from datetime import timedelta

from django.test import TestCase
from django.urls import reverse

from apps.accounts.models import Customer
from apps.catalog.models import Attribute, Option
from apps.shop.models import ShopConfig


class ShopConfigTests(TestCase):

    def test_current_creates_a_single_row(self):
        first = ShopConfig.current()
        second = ShopConfig.current()
        self.assertEqual(first.pk, second.pk)
        self.assertEqual(ShopConfig.objects.count(), 1)

    def test_defaults(self):
        shop = ShopConfig.current()
        self.assertEqual(shop.base_currency_symbol, "$")
        self.assertEqual(shop.base_currency_precision, 2)
        self.assertEqual(shop.cart_timeout_delta(), timedelta(hours=1))

    def test_cart_timeout_units(self):
        shop = ShopConfig.current()
        shop.cart_timeout = 2
        shop.cart_timeout_unit = ShopConfig.TimeoutUnit.DAY
        self.assertEqual(shop.cart_timeout_delta(), timedelta(days=2))

        shop.cart_timeout_unit = ShopConfig.TimeoutUnit.WEEK
        self.assertEqual(shop.cart_timeout_delta(), timedelta(weeks=2))

    def test_default_attributes(self):
        shop = ShopConfig.current()
        size = Attribute.objects.create(title="Size", is_default=True, shop_config=shop, sort_order=2)
        colour = Attribute.objects.create(title="Colour", is_default=True, shop_config=shop, sort_order=1)
        Option.objects.create(title="Small", attribute=size)

        self.assertEqual(list(shop.default_attributes()), [colour, size])
        self.assertIsNone(size.options.get().product_id)


class ShopConfigAdminTests(TestCase):

    def setUp(self):
        self.admin = Customer.objects.create_superuser(email="admin@example.com", password="admin-pass")
        self.client.force_login(self.admin)

    def test_changelist_redirects_to_the_single_config(self):
        shop = ShopConfig.current()
        response = self.client.get(reverse("admin:shop_shopconfig_changelist"))
        self.assertRedirects(response, reverse("admin:shop_shopconfig_change", args=[shop.pk]))

    def test_config_cannot_be_added_twice_or_deleted(self):
        ShopConfig.current()
        response = self.client.get(reverse("admin:shop_shopconfig_add"))
        self.assertEqual(response.status_code, 403)

    def test_currency_change_warning(self):
        shop = ShopConfig.current()
        shop.base_currency = "NZD"
        shop.save()

        response = self.client.get(reverse("admin:shop_shopconfig_change", args=[shop.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "will not convert existing order totals")

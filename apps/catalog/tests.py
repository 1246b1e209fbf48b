# apps/catalog/tests.py
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase, APIClient

from apps.shop.models import ShopConfig
from .models import Product, Attribute, Option, Variation


def make_sized_product(title="T-Shirt", amount="20.00"):
    """A product with Size and Colour attributes and two variations."""
    product = Product.objects.create(title=title, amount=Decimal(amount))
    size = Attribute.objects.create(title="Size", product=product, sort_order=1)
    colour = Attribute.objects.create(title="Colour", product=product, sort_order=2)
    small = Option.objects.create(title="Small", attribute=size, sort_order=1)
    large = Option.objects.create(title="Large", attribute=size, sort_order=2)
    red = Option.objects.create(title="Red", attribute=colour)

    small_red = Variation.objects.create(product=product, amount=Decimal("0"))
    small_red.options.set([small, red])
    large_red = Variation.objects.create(product=product, amount=Decimal("5.00"))
    large_red.options.set([large, red])

    return product, {"size": size, "colour": colour, "small": small, "large": large, "red": red,
                     "small_red": small_red, "large_red": large_red}


class ProductModelTests(TestCase):

    def setUp(self):
        shop = ShopConfig.current()
        shop.base_currency = "NZD"
        shop.save()

    def test_version_bumps_on_price_or_title_change(self):
        product = Product.objects.create(title="Mug", amount=Decimal("10"))
        self.assertEqual(product.version, 1)

        product.is_published = False
        product.save()
        self.assertEqual(product.version, 1)

        product.amount = Decimal("12")
        product.save()
        self.assertEqual(product.version, 2)

        product.title = "Big Mug"
        product.save()
        self.assertEqual(product.version, 3)

    def test_price_uses_shop_currency(self):
        product = Product.objects.create(title="Mug", amount=Decimal("10"))
        self.assertEqual(product.price().currency, "NZD")
        self.assertEqual(product.price().nice(), "$10.00")

    def test_requires_variation(self):
        plain = Product.objects.create(title="Mug", amount=Decimal("10"))
        product, _ = make_sized_product()
        self.assertFalse(plain.requires_variation())
        self.assertTrue(product.requires_variation())

    def test_find_variation(self):
        product, parts = make_sized_product()
        options = {str(parts["size"].pk): str(parts["large"].pk), str(parts["colour"].pk): str(parts["red"].pk)}

        self.assertEqual(product.find_variation(options), parts["large_red"])
        self.assertIsNone(product.find_variation({"size": str(parts["large"].pk)}))
        self.assertIsNone(product.find_variation({str(parts["size"].pk): parts["large"].pk}))
        self.assertIsNone(product.find_variation(None))

    def test_variation_price_map(self):
        product, parts = make_sized_product()
        price_map = {tuple(sorted(entry["options"])): entry["price"] for entry in product.variation_price_map()}
        key = tuple(sorted([parts["large"].pk, parts["red"].pk]))
        self.assertEqual(price_map[key], "$25.00")


class AttributeModelTests(TestCase):

    def test_copies_default_attribute_on_first_save(self):
        shop = ShopConfig.current()
        default = Attribute.objects.create(title="Size", description="Size", is_default=True, shop_config=shop)
        Option.objects.create(title="S", attribute=default, sort_order=1)
        Option.objects.create(title="M", attribute=default, sort_order=2)

        product = Product.objects.create(title="Hoodie", amount=Decimal("50"))
        attribute = Attribute.objects.create(product=product, default_attribute=default)

        self.assertEqual(attribute.title, "Size")
        self.assertEqual(list(attribute.options.values_list("title", flat=True)), ["S", "M"])
        self.assertTrue(all(o.product_id == product.pk for o in attribute.options.all()))
        self.assertEqual(attribute.option_summary(), "S, M")
        self.assertEqual(attribute.title_option_summary(), "Size - S, M")

    def test_adding_attribute_disables_incomplete_variations(self):
        product, parts = make_sized_product()
        Attribute.objects.create(title="Material", product=product)

        parts["small_red"].refresh_from_db()
        self.assertEqual(parts["small_red"].status, Variation.Status.DISABLED)

    def test_option_field_map(self):
        product, parts = make_sized_product()
        field_map = parts["colour"].option_field_map(parts["size"])

        self.assertEqual(dict(field_map[parts["small"].pk]), {parts["red"].pk: "Red"})
        self.assertEqual(dict(field_map[parts["large"].pk]), {parts["red"].pk: "Red"})
        self.assertEqual(parts["size"].option_field_map(None), {})


class VariationModelTests(TestCase):

    def test_validate_for_cart(self):
        product, parts = make_sized_product()
        variation = parts["small_red"]
        self.assertTrue(variation.validate_for_cart().is_valid())

        variation.status = Variation.Status.DISABLED
        variation.save()
        self.assertTrue(variation.validate_for_cart().has_code("VariationStatusError"))

        variation.options.remove(parts["red"])
        self.assertTrue(variation.validate_for_cart().has_code("VariationOptionsError"))

    def test_summary_of_options_follows_attribute_order(self):
        product, parts = make_sized_product()
        self.assertEqual(parts["large_red"].summary_of_options(), "Size: Large, Colour: Red")

    def test_version_bumps_on_amount_change(self):
        product, parts = make_sized_product()
        variation = parts["large_red"]
        variation.amount = Decimal("6")
        variation.save()
        self.assertEqual(variation.version, 2)


class ProductViewSetTests(APITestCase):

    def setUp(self):
        self.client = APIClient()
        shop = ShopConfig.current()
        shop.base_currency = "NZD"
        shop.save()
        self.mug = Product.objects.create(title="Mug", amount=Decimal("10"))
        self.hidden = Product.objects.create(title="Hidden", amount=Decimal("1"), is_published=False)

    def test_list_only_published(self):
        response = self.client.get("/api/v1/catalog/products/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        titles = [p["title"] for p in response.data]
        self.assertIn("Mug", titles)
        self.assertNotIn("Hidden", titles)

    def test_detail_includes_option_fields(self):
        product, parts = make_sized_product()
        response = self.client.get(f"/api/v1/catalog/products/{product.pk}/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["requires_variation"])
        self.assertEqual(len(response.data["option_fields"]), 2)
        self.assertIsNone(response.data["option_fields"][0]["prev"])
        self.assertEqual(response.data["option_fields"][1]["prev"], f"options[{parts['size'].pk}]")

    def test_add_to_cart(self):
        url = reverse("product-add-to-cart", args=[self.mug.pk])
        response = self.client.post(url, {"quantity": 2}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["message"], "The product was added to your cart.")
        self.assertEqual(response.data["cart"]["item_count"], 2)

    def test_add_to_cart_rejects_bad_quantity(self):
        url = reverse("product-add-to-cart", args=[self.mug.pk])
        response = self.client.post(url, {"quantity": 0}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["quantity"], ["The quantity must be at least 1"])

    def test_add_to_cart_requires_options(self):
        product, parts = make_sized_product()
        url = reverse("product-add-to-cart", args=[product.pk])

        response = self.client.post(url, {"quantity": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        options = {str(parts["size"].pk): parts["small"].pk, str(parts["colour"].pk): parts["red"].pk}
        response = self.client.post(url, {"quantity": 1, "options": options}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["cart"]["items"][0]["variation"], parts["small_red"].pk)

    def test_add_to_cart_rejects_unreadable_options(self):
        product, parts = make_sized_product()
        url = reverse("product-add-to-cart", args=[product.pk])

        response = self.client.post(url, {"quantity": 1, "options": {"size": parts["small"].pk}}, format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("This product requires options", str(response.data))

    def test_add_to_cart_needs_currency(self):
        shop = ShopConfig.current()
        shop.base_currency = ""
        shop.save()

        url = reverse("product-add-to-cart", args=[self.mug.pk])
        response = self.client.post(url, {"quantity": 1}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

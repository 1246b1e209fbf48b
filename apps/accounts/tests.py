from django.contrib.auth.models import Group
from django.test import TestCase

from apps.accounts.models import Customer, CUSTOMERS_GROUP, current_user
from apps.accounts.receivers import get_customers_group
from apps.orders.models import Order


class CustomerModelTests(TestCase):

    def setUp(self):
        self.customer = Customer.objects.create_user(
            email="Jane@Example.com", password="secret-pass", first_name="Jane", surname="Doe"
        )
        self.admin = Customer.objects.create_superuser(email="admin@example.com", password="admin-pass")

    def test_create_user_normalises_email_and_sets_code(self):
        self.assertEqual(self.customer.email, "Jane@example.com")
        self.assertTrue(self.customer.code.startswith("C-"))
        self.assertTrue(self.customer.check_password("secret-pass"))
        self.assertFalse(self.customer.is_staff)

    def test_create_user_requires_email(self):
        with self.assertRaises(ValueError):
            Customer.objects.create_user(email="", password="x")

    def test_name(self):
        self.assertEqual(self.customer.name, "Jane Doe")
        self.assertEqual(self.customer.get_short_name(), "Jane")
        self.assertEqual(str(self.customer), "Jane Doe")

    def test_orders_placed_excludes_carts(self):
        Order.objects.create(member=self.customer)
        placed = Order.objects.create(member=self.customer, status=Order.Status.PENDING)

        self.assertEqual(list(self.customer.orders_placed()), [placed])

    def test_only_superusers_delete_customers_without_orders(self):
        self.assertFalse(self.customer.can_delete(self.customer))
        self.assertTrue(self.customer.can_delete(self.admin))

        count, _ = self.customer.delete(user=self.customer)
        self.assertEqual(count, 0)
        self.assertTrue(Customer.objects.filter(pk=self.customer.pk).exists())

    def test_customers_with_orders_cannot_be_deleted(self):
        Order.objects.create(member=self.customer, status=Order.Status.PENDING)

        self.assertFalse(self.customer.can_delete(self.admin))
        self.customer.delete(user=self.admin)
        self.assertTrue(Customer.objects.filter(pk=self.customer.pk).exists())

    def test_superuser_deletes_customer(self):
        self.customer.delete(user=self.admin)
        self.assertFalse(Customer.objects.filter(pk=self.customer.pk).exists())

    def test_is_selectable_order(self):
        cart = Order.objects.create(member=self.customer)
        placed = Order.objects.create(member=self.customer, status=Order.Status.PENDING)
        someone_elses = Order.objects.create(member=self.admin)

        self.assertTrue(self.customer.is_selectable_order(cart))
        self.assertFalse(self.customer.is_selectable_order(placed))
        self.assertFalse(self.customer.is_selectable_order(someone_elses))
        self.assertFalse(self.customer.is_selectable_order(None))


class CustomersGroupTests(TestCase):

    def test_group_carries_view_order_permission(self):
        group = get_customers_group()
        self.assertEqual(group.name, CUSTOMERS_GROUP)
        self.assertTrue(group.permissions.filter(codename="view_order").exists())

    def test_group_is_created_once(self):
        get_customers_group()
        get_customers_group()
        self.assertEqual(Group.objects.filter(name=CUSTOMERS_GROUP).count(), 1)

    def test_group_members_can_view_orders(self):
        customer = Customer.objects.create_user(email="member@example.com", password="pw")
        customer.groups.add(get_customers_group())
        # Permission cache is per instance
        customer = Customer.objects.get(pk=customer.pk)
        self.assertTrue(customer.has_perm("orders.view_order"))


class CurrentUserTests(TestCase):

    def test_anonymous_request_has_no_current_user(self):
        from django.contrib.auth.models import AnonymousUser
        from django.test import RequestFactory

        request = RequestFactory().get("/")
        request.user = AnonymousUser()
        self.assertIsNone(current_user(request))

        customer = Customer.objects.create_user(email="c@example.com", password="pw")
        request.user = customer
        self.assertEqual(current_user(request), customer)

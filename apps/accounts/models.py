import logging

from django.db import models
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.utils import timezone

from apps.utils.utils import generate_code
from .managers import CustomerManager

logger = logging.getLogger(__name__)

CUSTOMERS_GROUP = "Customers"


class Customer(AbstractBaseUser, PermissionsMixin):
    """
    Shop customer, identified by email.
    Admin staff are customers with is_staff set.
    """
    first_name = models.CharField(max_length=150, blank=True)
    surname = models.CharField(max_length=150, blank=True)
    email = models.EmailField(unique=True)
    phone = models.CharField(max_length=30, blank=True)
    code = models.CharField(max_length=20, blank=True, db_index=True)

    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    objects = CustomerManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        verbose_name = 'Customer'
        verbose_name_plural = 'Customers'
        ordering = ('surname', 'first_name')

    def __str__(self):
        return self.name or self.email

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = generate_code("C-")
        super().save(*args, **kwargs)

    @property
    def name(self):
        return " ".join(part for part in (self.first_name, self.surname) if part)

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.first_name

    def orders_placed(self):
        """Orders that went through checkout, newest first."""
        from apps.orders.models import Order

        return self.orders.exclude(status=Order.Status.CART).order_by('-id')

    def can_delete(self, user=None):
        if self.pk and self.orders_placed().exists():
            return False
        return bool(user and user.is_superuser)

    def delete(self, *args, user=None, **kwargs):
        if not self.can_delete(user):
            logger.warning(
                f"Refused to delete customer {self.pk}",
                extra={"user_id": getattr(user, "pk", None)},
            )
            return 0, {}
        return super().delete(*args, **kwargs)

    def is_selectable_order(self, order):
        """True when the order is still this customer's cart."""
        from apps.orders.models import Order

        return (
            order is not None
            and order.member_id == self.pk
            and order.status == Order.Status.CART
        )


def current_user(request):
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return user
    return None

import logging

from django.contrib.auth.models import Group, Permission

from .models import CUSTOMERS_GROUP

logger = logging.getLogger(__name__)


def get_customers_group():
    """
    The group every shop customer belongs to. It carries
    orders.view_order so customers can read their own orders.
    """
    group, created = Group.objects.get_or_create(name=CUSTOMERS_GROUP)
    if created:
        logger.info(f"Created '{CUSTOMERS_GROUP}' group")

    permission = Permission.objects.filter(
        content_type__app_label="orders", codename="view_order"
    ).first()
    if permission is not None and not group.permissions.filter(pk=permission.pk).exists():
        group.permissions.add(permission)
    return group


def create_customers_group(sender, **kwargs):
    get_customers_group()

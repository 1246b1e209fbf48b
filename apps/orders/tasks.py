import logging

from celery import shared_task
from django.utils import timezone

from .models import Order
from .services import StandingOrderService

logger = logging.getLogger(__name__)


@shared_task
def delete_abandoned_carts():
    deleted = Order.delete_abandoned(now=timezone.now())
    return deleted


@shared_task
def place_standing_orders():
    placed = StandingOrderService.place_due_orders()
    logger.info(f"Placed {len(placed)} standing orders")
    return [order.pk for order in placed]

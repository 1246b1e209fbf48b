"""
Orders models, split across modules:

    from apps.orders.models import Order, StandingOrder
"""

from .order import Order  # noqa: F401
from .item import Item, ItemOption  # noqa: F401
from .modification import Modification  # noqa: F401
from .update import OrderUpdate  # noqa: F401
from .standing import StandingOrder  # noqa: F401

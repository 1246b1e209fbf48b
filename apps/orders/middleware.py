from django.utils.deprecation import MiddlewareMixin

from .services import CartService


class CartActivityMiddleware(MiddlewareMixin):
    """
    Keeps the session cart's last_active current so it is not
    collected as abandoned while the customer is still shopping.
    """

    def process_request(self, request):
        if hasattr(request, "session"):
            CartService.touch(request)

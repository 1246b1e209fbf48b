# apps/utils/views.py
from django.conf import settings
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class GlobalConfigView(APIView):
    """
    Storefront settings the frontend needs before checkout.
    """
    permission_classes = [AllowAny]

    def get(self, request):
        from apps.shop.models import ShopConfig

        shop = ShopConfig.current()
        return Response({
            "base_currency": shop.base_currency,
            "base_currency_symbol": shop.base_currency_symbol,
            "base_delivery_fee": str(settings.BASE_DELIVERY_FEE),
            "razorpay_key_id": settings.RAZORPAY_KEY_ID,
        })

import logging

from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.utils.exceptions import BusinessLogicException
from .models import Order
from .serializers import (
    CartSerializer,
    CartUpdateSerializer,
    CheckoutSerializer,
    CheckoutUpdateSerializer,
    OrderSerializer,
    RepaySerializer,
)
from .services import CartService, RepayService

logger = logging.getLogger(__name__)


class CanViewOrders(BasePermission):
    """Customers group members (and admins) hold orders.view_order."""

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.has_perm("orders.view_order")


def _payment_response(order, payment, error):
    data = {
        "order": OrderSerializer(order).data,
        "redirect_url": order.link(),
        "payment": None,
    }
    if payment is not None:
        data["payment"] = payment.client_payload()
    if error:
        data["error"] = error
    return data


class CartView(APIView):
    permission_classes = []

    def get(self, request):
        order = CartService.get_current_order(request)
        return Response(CartSerializer(order).data)

    def post(self, request):
        order = CartService.get_current_order(request)
        serializer = CartUpdateSerializer(data=request.data, context={"request": request, "order": order})
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return Response(CartSerializer(order).data)


class CheckoutView(APIView):
    permission_classes = []

    def post(self, request):
        serializer = CheckoutSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        order, payment, error = serializer.save()

        return Response(
            _payment_response(order, payment, error),
            status=status.HTTP_201_CREATED if error is None else status.HTTP_200_OK,
        )


class CheckoutUpdateView(APIView):
    permission_classes = []

    def post(self, request):
        serializer = CheckoutUpdateSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        order = serializer.save()
        return Response(CartSerializer(order).data)


class AccountOrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated, CanViewOrders]

    def _get_order(self, request, pk):
        try:
            return RepayService.get_viewable_order(request.user, pk)
        except BusinessLogicException as e:
            raise PermissionDenied(e.message)

    def list(self, request):
        orders = request.user.orders_placed()
        return Response(OrderSerializer(orders, many=True).data)

    def retrieve(self, request, pk=None):
        order = self._get_order(request, pk)
        return Response(OrderSerializer(order).data)


class RepayView(AccountOrderViewSet):

    def get(self, request, pk=None):
        from apps.payments.processors import get_supported_methods

        order = self._get_order(request, pk)
        RepayService.start(request, order)
        return Response({
            "order": OrderSerializer(order).data,
            "total_outstanding": order.total_outstanding().nice(),
            "payment_methods": get_supported_methods(),
        })

    def post(self, request, pk=None):
        order = self._get_order(request, pk)
        serializer = RepaySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        payment, error = RepayService.process(request, order, serializer.validated_data["payment_method"])
        order.refresh_from_db()
        return Response(_payment_response(order, payment, error))

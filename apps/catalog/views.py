import logging

from rest_framework import viewsets, filters, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from .models import Product
from .serializers import ProductSerializer

logger = logging.getLogger(__name__)


class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Published products, with the option map the add-to-cart form needs.
    """
    queryset = Product.objects.filter(is_published=True).prefetch_related('attributes__options')
    serializer_class = ProductSerializer
    permission_classes = [AllowAny]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['is_published']
    search_fields = ['title']

    @action(detail=True, methods=['post'], url_path='add')
    def add_to_cart(self, request, pk=None):
        from apps.orders.serializers import AddToCartSerializer, CartSerializer

        product = self.get_object()
        serializer = AddToCartSerializer(
            data=request.data,
            context={"request": request, "product": product},
        )
        serializer.is_valid(raise_exception=True)
        order = serializer.save()

        return Response({
            "message": "The product was added to your cart.",
            "cart": CartSerializer(order).data,
        }, status=status.HTTP_201_CREATED)

from django.urls import path

from .views import (
    AccountOrderViewSet,
    CartView,
    CheckoutUpdateView,
    CheckoutView,
    RepayView,
)

order_list = AccountOrderViewSet.as_view({"get": "list"})
order_detail = AccountOrderViewSet.as_view({"get": "retrieve"})
order_repay = RepayView.as_view({"get": "get", "post": "post"})

urlpatterns = [
    path("cart/", CartView.as_view(), name="cart"),
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("checkout/update/", CheckoutUpdateView.as_view(), name="checkout-update"),
    path("account/orders/", order_list, name="account-order-list"),
    path("account/orders/<int:pk>/", order_detail, name="account-order-detail"),
    path("account/orders/<int:pk>/repay/", order_repay, name="account-order-repay"),
]

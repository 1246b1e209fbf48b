from django.contrib import admin
from django.urls import path, include
from django.conf import settings

admin_url = settings.ADMIN_URL.strip("/") + "/"

admin.site.site_header = f"{settings.SHOP_NAME} Shop"
admin.site.site_title = "Shop"

urlpatterns = [
    path(admin_url, admin.site.urls),

    path('api/v1/catalog/', include('apps.catalog.urls')),
    path('api/v1/', include('apps.orders.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
    path('api/v1/utils/', include('apps.utils.urls')),
]

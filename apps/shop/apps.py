from django.apps import AppConfig


class ShopConfigApp(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.shop'
    verbose_name = 'Shop'

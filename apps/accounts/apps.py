from django.apps import AppConfig
from django.db.models.signals import post_migrate


class AccountsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.accounts'

    def ready(self):
        from .receivers import create_customers_group

        # Runs after auth has created each app's permissions
        post_migrate.connect(create_customers_group, dispatch_uid="accounts_customers_group")

from django.core.management.base import BaseCommand

from apps.orders.models import Order


class Command(BaseCommand):
    help = "Delete carts that have been inactive for longer than the shop's cart timeout."

    def handle(self, *args, **options):
        deleted = Order.delete_abandoned()
        self.stdout.write(self.style.SUCCESS(f"Deleted {deleted} abandoned carts"))

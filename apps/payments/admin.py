from django.contrib import admin

from .models import Payment, WebhookLog


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('id', 'order', 'amount', 'currency', 'status', 'method', 'transaction_id', 'created_at')
    list_filter = ('status', 'method', 'created_at')
    search_fields = ('transaction_id', 'gateway_order_id', 'order__id')
    readonly_fields = ('order', 'paid_by', 'amount', 'currency', 'method', 'gateway_order_id', 'gateway_response')

    def has_add_permission(self, request):
        return False


@admin.register(WebhookLog)
class WebhookLogAdmin(admin.ModelAdmin):
    list_display = ('event_id', 'provider', 'is_processed', 'created_at')
    list_filter = ('is_processed', 'created_at')
    readonly_fields = ('payload',)

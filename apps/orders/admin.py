import csv

from django.contrib import admin
from django.db.models import Q
from django.http import HttpResponse

from .models import Order, Item, OrderUpdate, Modification, StandingOrder


class ItemInline(admin.TabularInline):
    model = Item
    extra = 0
    fields = ('product', 'summary_of_options', 'unit_price', 'quantity', 'total_price')
    readonly_fields = fields

    def summary_of_options(self, obj):
        return obj.summary_of_options()

    summary_of_options.short_description = "Options"

    def unit_price(self, obj):
        return obj.unit_amount().nice()

    def total_price(self, obj):
        return obj.total().nice()

    total_price.short_description = "Total"

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class ModificationInline(admin.TabularInline):
    model = Modification
    extra = 0
    fields = ('description', 'value', 'price', 'sub_total_modifier')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class OrderUpdateInline(admin.TabularInline):
    """Updates can be added but never edited or removed."""
    model = OrderUpdate
    extra = 1
    fields = ('status', 'note', 'visible', 'member', 'created_at')
    readonly_fields = ('member', 'created_at')

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class BaseOrderAdmin(admin.ModelAdmin):
    list_display = ('order_no', 'ordered_on', 'customer_name', 'customer_email', 'total_display', 'status')
    list_filter = ('status',)
    search_fields = ('id', 'member__surname', 'member__email')
    date_hierarchy = 'ordered_on'
    inlines = [ItemInline, ModificationInline, OrderUpdateInline]
    actions = ['export_as_csv']

    readonly_fields = (
        'member',
        'ordered_on',
        'payment_status',
        'total_display',
        'sub_total_display',
        'payment_summary',
        'base_currency',
        'env',
    )
    fieldsets = (
        ('Order', {
            'fields': ('status', 'member', 'ordered_on', 'env')
        }),
        ('Totals', {
            'fields': ('sub_total_display', 'total_display', 'base_currency')
        }),
        ('Payment', {
            'fields': ('payment_status', 'payment_summary')
        }),
    )

    def get_queryset(self, request):
        # Orders that went through to payment, or were placed from a standing order
        return (
            super().get_queryset(request)
            .filter(Q(payments__isnull=False) | Q(standing_order__isnull=False))
            .distinct()
            .select_related('member')
        )

    def order_no(self, obj):
        return obj.pk

    order_no.short_description = "Order No"
    order_no.admin_order_field = 'id'

    def customer_name(self, obj):
        return obj.member.name if obj.member else ""

    customer_name.short_description = "Customer"
    customer_name.admin_order_field = 'member__surname'

    def customer_email(self, obj):
        return obj.member.email if obj.member else ""

    customer_email.short_description = "Email"

    def total_display(self, obj):
        return obj.summary_of_total()

    total_display.short_description = "Total"

    def sub_total_display(self, obj):
        return obj.sub_total().nice()

    sub_total_display.short_description = "Sub total"

    def payment_summary(self, obj):
        return obj.summary_of_payment_status()

    payment_summary.short_description = "Payments"

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        if obj is None:
            return super().has_delete_permission(request)
        return obj.can_delete(request.user)

    def delete_model(self, request, obj):
        obj.delete(user=request.user)

    def delete_queryset(self, request, queryset):
        for obj in queryset:
            obj.delete(user=request.user)

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for instance in instances:
            if isinstance(instance, OrderUpdate) and instance.member_id is None:
                instance.member = request.user
            instance.save()
        formset.save_m2m()

    def csv_row(self, obj):
        return [
            obj.pk,
            obj.ordered_on.isoformat() if obj.ordered_on else "",
            self.customer_name(obj),
            self.customer_email(obj),
            obj.total().nice(),
            obj.status,
        ]

    csv_header = ["Order No", "Ordered On", "Customer", "Email", "Total", "Status"]

    def export_as_csv(self, request, queryset):
        response = HttpResponse(content_type='text/csv')
        response['Content-Disposition'] = f'attachment; filename="{self.model._meta.model_name}s.csv"'
        writer = csv.writer(response)
        writer.writerow(self.csv_header)
        for obj in queryset:
            writer.writerow(self.csv_row(obj))
        return response

    export_as_csv.short_description = "Export selected as CSV"


@admin.register(Order)
class OrderAdmin(BaseOrderAdmin):
    pass


@admin.register(StandingOrder)
class StandingOrderAdmin(BaseOrderAdmin):
    list_display = BaseOrderAdmin.list_display + ('name', 'frequency', 'start_date', 'enabled')
    list_filter = ('status', 'frequency', 'enabled')
    fieldsets = BaseOrderAdmin.fieldsets + (
        ('Schedule', {
            'fields': ('name', 'frequency', 'start_date', 'enabled')
        }),
    )
    csv_header = BaseOrderAdmin.csv_header + ["Name", "Frequency", "Start date", "Enabled"]

    def csv_row(self, obj):
        return super().csv_row(obj) + [
            obj.name,
            obj.frequency,
            obj.start_date.isoformat() if obj.start_date else "",
            "Yes" if obj.enabled else "No",
        ]

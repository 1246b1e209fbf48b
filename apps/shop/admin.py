from django.contrib import admin, messages

from apps.catalog.models import Attribute
from .models import ShopConfig


class DefaultAttributeInline(admin.TabularInline):
    model = Attribute
    fk_name = 'shop_config'
    extra = 0
    fields = ('title', 'description', 'sort_order')
    verbose_name = "Default attribute"
    verbose_name_plural = "Default attributes"

    def get_queryset(self, request):
        return super().get_queryset(request).filter(is_default=True, product__isnull=True)


@admin.register(ShopConfig)
class ShopConfigAdmin(admin.ModelAdmin):
    fieldsets = (
        ('Receipt email', {
            'fields': ('receipt_from', 'receipt_subject', 'receipt_body', 'email_signature')
        }),
        ('Base currency', {
            'fields': ('base_currency', 'base_currency_symbol', 'base_currency_precision')
        }),
        ('Carts', {
            'fields': ('cart_timeout', 'cart_timeout_unit')
        }),
    )
    inlines = [DefaultAttributeInline]

    def has_add_permission(self, request):
        return not ShopConfig.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False

    def changelist_view(self, request, extra_context=None):
        from django.shortcuts import redirect
        from django.urls import reverse

        config = ShopConfig.current()
        return redirect(reverse('admin:shop_shopconfig_change', args=[config.pk]))

    def change_view(self, request, object_id, form_url='', extra_context=None):
        config = self.get_object(request, object_id)
        if config is not None and config.base_currency:
            self.message_user(
                request,
                "Changing the base currency after orders are placed will not convert existing order totals.",
                level=messages.WARNING,
            )
        return super().change_view(request, object_id, form_url, extra_context)

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for obj in formset.deleted_objects:
            obj.delete()
        for instance in instances:
            instance.is_default = True
            instance.product = None
            instance.save()
        formset.save_m2m()

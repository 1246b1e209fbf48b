# apps/catalog/admin.py
from django.contrib import admin
from .models import Product, Variation, Attribute, Option


class EditAttributesPermissionMixin:
    """
    Attributes and options share one 'edit attributes' permission.
    Viewing is always allowed for staff.
    """
    edit_permission = "catalog.change_attribute"

    def has_add_permission(self, request, obj=None):
        return request.user.has_perm(self.edit_permission)

    def has_change_permission(self, request, obj=None):
        return request.user.has_perm(self.edit_permission)

    def has_delete_permission(self, request, obj=None):
        return request.user.has_perm(self.edit_permission)

    def has_view_permission(self, request, obj=None):
        return request.user.is_active and request.user.is_staff


class OptionInline(EditAttributesPermissionMixin, admin.TabularInline):
    model = Option
    edit_permission = "catalog.change_option"
    extra = 0
    fields = ("title", "description", "sort_order")
    ordering = ("sort_order",)


class AttributeInline(EditAttributesPermissionMixin, admin.TabularInline):
    model = Attribute
    fk_name = "product"
    extra = 0
    fields = ("default_attribute", "title", "description", "sort_order")
    show_change_link = True


class VariationInline(admin.TabularInline):
    model = Variation
    extra = 0
    fields = ("options", "amount", "status", "version")
    readonly_fields = ("version",)
    filter_horizontal = ("options",)

    def formfield_for_manytomany(self, db_field, request, **kwargs):
        if db_field.name == "options":
            product_id = request.resolver_match.kwargs.get("object_id") if request.resolver_match else None
            kwargs["queryset"] = Option.objects.filter(product_id=product_id).select_related("attribute")
        return super().formfield_for_manytomany(db_field, request, **kwargs)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "amount", "is_published", "version", "updated_at")
    list_filter = ("is_published",)
    search_fields = ("title",)
    readonly_fields = ("version", "created_at", "updated_at")
    inlines = [AttributeInline, VariationInline]


@admin.register(Attribute)
class AttributeAdmin(EditAttributesPermissionMixin, admin.ModelAdmin):
    list_display = ("title", "description", "option_summary", "product", "is_default")
    list_filter = ("is_default",)
    search_fields = ("title",)
    inlines = [OptionInline]

    def option_summary(self, obj):
        return obj.option_summary()

    option_summary.short_description = "Options"

    def get_readonly_fields(self, request, obj=None):
        # The default attribute can only be picked when the attribute is created
        if obj is not None:
            return ("default_attribute",)
        return ()

    def save_formset(self, request, form, formset, change):
        instances = formset.save(commit=False)
        for obj in formset.deleted_objects:
            obj.delete()
        for instance in instances:
            if instance.attribute.product_id and not instance.product_id:
                instance.product_id = instance.attribute.product_id
            instance.save()
        formset.save_m2m()
        # Option changes can invalidate existing variations
        form.instance.disable_invalid_variations()

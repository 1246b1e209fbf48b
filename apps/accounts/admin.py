from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(BaseUserAdmin):
    ordering = ['surname', 'first_name']
    list_display = ['email', 'first_name', 'surname', 'phone', 'is_active', 'date_joined']
    list_filter = ['is_active', 'is_staff', 'groups']
    search_fields = ['surname', 'email']

    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Personal info', {'fields': ('first_name', 'surname', 'phone', 'code')}),
        ('Permissions', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Important dates', {'fields': ('last_login', 'date_joined')}),
    )
    readonly_fields = ['code', 'last_login', 'date_joined']

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

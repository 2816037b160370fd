"""
accounts/admin.py
─────────────────
Admin registration for the staff user model.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(BaseUserAdmin):
    """
    Extends the default UserAdmin to surface the camp role.
    """

    list_display  = BaseUserAdmin.list_display + ('role',)
    list_filter   = BaseUserAdmin.list_filter  + ('role',)

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Camp Role', {'fields': ('role',)}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Camp Role', {'fields': ('role',)}),
    )

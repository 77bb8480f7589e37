"""
Core — Django Admin Configuration

Audit log browser. Entries are written by services only, so the admin
is view-only.

@file core/admin.py
"""

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from core.models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'model_name', 'object_id', 'actor')
    list_filter = ('action', 'model_name')
    search_fields = ('object_id', 'actor__email')
    readonly_fields = (
        'id', 'actor', 'action', 'model_name', 'object_id',
        'old_values', 'new_values', 'ip_address', 'timestamp',
    )
    date_hierarchy = 'timestamp'
    list_select_related = ('actor',)
    list_per_page = 50

    fieldsets = (
        (_('Event'), {'fields': ('id', 'action', 'timestamp', 'actor', 'ip_address')}),
        (_('Target'), {'fields': ('model_name', 'object_id')}),
        (_('Data'), {'fields': ('old_values', 'new_values'), 'classes': ('collapse',)}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

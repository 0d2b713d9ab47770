from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('timestamp', 'action', 'target_model', 'target_object_id', 'actor')
    list_filter = ('action',)
    readonly_fields = ('timestamp', 'action', 'target_model', 'target_object_id', 'actor', 'details')

from django.contrib import admin

from .models import Certificate


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = ('certificate_number', 'exam_result', 'status', 'issued_date')
    list_filter = ('status',)
    search_fields = ('certificate_number',)
    readonly_fields = ('certificate_number', 'exam_result', 'issued_date')

# certificates/models.py
from django.conf import settings
from django.db import models
from assessments.models import ExamResult

class Certificate(models.Model):
    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        REVOKED = "revoked", "Revoked"

    # Unique number for public verification
    certificate_number = models.CharField(max_length=100, unique=True)
    # One-to-one keeps issuance idempotent even when two requests race
    exam_result = models.OneToOneField(ExamResult, on_delete=models.CASCADE, related_name='certificate')

    issued_date = models.DateTimeField(auto_now_add=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.ACTIVE)
    revoked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'certificates'
        ordering = ['-issued_date']

    def __str__(self):
        return f"Cert {self.certificate_number} for {self.exam_result.student}"

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    @property
    def verification_url(self):
        return f"{settings.EXAMS['CERTIFICATE_VERIFY_URL']}{self.certificate_number}"

from django.db import models
from django.conf import settings


class AuditLog(models.Model):
    """
    Append-only record of lifecycle events.

    Downstream collaborators (reminders, result notices, certificate mails)
    poll this table instead of being called from the grading path.
    """
    class Action(models.TextChoices):
        EXAM_CREATED = 'EXAM_CREATED', 'Exam Created'
        EXAM_UPDATED = 'EXAM_UPDATED', 'Exam Updated'
        EXAM_DELETED = 'EXAM_DELETED', 'Exam Deleted'
        RESULT_GRADED = 'RESULT_GRADED', 'Result Graded'
        CERTIFICATE_ISSUED = 'CERTIFICATE_ISSUED', 'Certificate Issued'
        CERTIFICATE_REVOKED = 'CERTIFICATE_REVOKED', 'Certificate Revoked'

    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=30, choices=Action.choices)
    target_model = models.CharField(max_length=50, help_text="e.g., Exam, ExamResult, Certificate")
    target_object_id = models.CharField(max_length=100, blank=True, null=True)
    details = models.TextField(blank=True, help_text="Description of the event")
    timestamp = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='auditlog_action_ts_idx'),
        ]

    def __str__(self):
        return f"{self.actor} - {self.action} - {self.timestamp}"

    @classmethod
    def record(cls, action, target, actor=None, details='', using=None):
        return cls.objects.db_manager(using).create(
            actor_id=getattr(actor, 'pk', actor),
            action=action,
            target_model=target.__class__.__name__,
            target_object_id=str(target.pk),
            details=details,
        )

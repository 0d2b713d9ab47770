import logging
import secrets

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from assessments.models import ExamResult
from cores.models import AuditLog
from cores.signals import certificate_issued
from .models import Certificate

logger = logging.getLogger(__name__)


class CertificateNotIssuable(Exception):
    pass


class CertificateIssuer:
    """
    Issues at most one certificate per passed ExamResult.

    Numbers look like CERT-<exam>-<student>-<token>: the ids make a number
    traceable for audits, the random token keeps it from being guessed.
    """
    max_attempts = 5

    def __init__(self, using=None, prefix=None):
        self.using = using
        self.prefix = prefix or settings.EXAMS.get('CERTIFICATE_PREFIX', 'CERT')

    @property
    def certificates(self):
        return Certificate.objects.db_manager(self.using)

    def generate_number(self, exam_result):
        token = secrets.token_hex(6).upper()
        return f"{self.prefix}-{exam_result.exam_id}-{exam_result.student_id}-{token}"

    def issue(self, exam_result, actor=None):
        if not isinstance(exam_result, ExamResult):
            exam_result = ExamResult.objects.db_manager(self.using).get(pk=exam_result)
        if exam_result.status != ExamResult.Status.PASSED:
            raise CertificateNotIssuable(f"Result {exam_result.pk} has status {exam_result.status}.")

        existing = self.certificates.filter(exam_result=exam_result).first()
        if existing:
            return existing

        for _ in range(self.max_attempts):
            number = self.generate_number(exam_result)
            try:
                with transaction.atomic(using=self.using):
                    certificate = self.certificates.create(
                        exam_result=exam_result, certificate_number=number
                    )
            except IntegrityError:
                # Either a concurrent issue won the race or the number collided
                existing = self.certificates.filter(exam_result=exam_result).first()
                if existing:
                    return existing
                continue

            AuditLog.record(
                AuditLog.Action.CERTIFICATE_ISSUED,
                certificate,
                actor=actor,
                details=f"Certificate {certificate.certificate_number} issued for result {exam_result.pk}",
                using=self.using,
            )
            transaction.on_commit(
                lambda: certificate_issued.send(sender=Certificate, certificate=certificate),
                using=self.using,
            )
            logger.info("Issued certificate %s for result %s", certificate.certificate_number, exam_result.pk)
            return certificate

        raise IntegrityError(f"Could not allocate a unique certificate number for result {exam_result.pk}")

    def revoke(self, certificate, actor=None):
        if certificate.status == Certificate.Status.REVOKED:
            return certificate
        certificate.status = Certificate.Status.REVOKED
        certificate.revoked_at = timezone.now()
        certificate.save(using=self.using, update_fields=['status', 'revoked_at'])
        AuditLog.record(
            AuditLog.Action.CERTIFICATE_REVOKED,
            certificate,
            actor=actor,
            details=f"Certificate {certificate.certificate_number} revoked",
            using=self.using,
        )
        logger.info("Revoked certificate %s", certificate.certificate_number)
        return certificate

    def verify(self, certificate_number):
        return self.certificates.select_related(
            'exam_result__exam__teacher', 'exam_result__student'
        ).get(certificate_number=certificate_number)

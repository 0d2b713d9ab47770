from django.db import models
from django.utils import timezone

from exams.models import Exam
from .exceptions import AlreadyTaken, ExamInactive, ExamNotFound, Expired, NotYetOpen
from .models import ExamResult


class Admission(models.TextChoices):
    ADMITTED = "admitted", "Admitted"
    ALREADY_TAKEN = "already_taken", "Already taken"
    NOT_YET_OPEN = "not_yet_open", "Not yet open"
    EXPIRED = "expired", "Expired"
    EXAM_INACTIVE = "exam_inactive", "Exam inactive"


REJECTIONS = {
    Admission.ALREADY_TAKEN: AlreadyTaken,
    Admission.NOT_YET_OPEN: NotYetOpen,
    Admission.EXPIRED: Expired,
    Admission.EXAM_INACTIVE: ExamInactive,
}


class AttemptGuard:
    """
    Decides whether a student may submit for an exam right now.

    The answer is only advisory outside a transaction: the unique
    (exam, student) constraint on ExamResult is what actually stops a
    second attempt from being stored.
    """

    def __init__(self, using=None):
        self.using = using

    def get_exam(self, exam, for_update=False):
        if isinstance(exam, Exam):
            return exam
        queryset = Exam.objects.db_manager(self.using).all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=exam)
        except (Exam.DoesNotExist, ValueError, TypeError):
            raise ExamNotFound()

    def check(self, exam, student, now=None):
        exam = self.get_exam(exam)
        now = now or timezone.now()
        student_id = getattr(student, 'pk', student)

        if not exam.is_active:
            return Admission.EXAM_INACTIVE
        already_taken = ExamResult.objects.db_manager(self.using).filter(
            exam_id=exam.pk, student_id=student_id
        ).exists()
        if already_taken:
            return Admission.ALREADY_TAKEN
        if now < exam.start_time:
            return Admission.NOT_YET_OPEN
        if now > exam.end_time:
            return Admission.EXPIRED
        return Admission.ADMITTED

    def enforce(self, exam, student, now=None):
        """Like check(), but raises the matching SubmissionRejected."""
        admission = self.check(exam, student, now=now)
        if admission != Admission.ADMITTED:
            raise REJECTIONS[admission]()
        return admission

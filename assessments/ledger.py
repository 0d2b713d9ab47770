import logging
from collections.abc import Mapping, Sequence

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from certificates.issuer import CertificateIssuer
from cores.models import AuditLog
from cores.signals import result_graded
from .exceptions import AlreadyTaken, MalformedSubmission, SubmissionRejected, TransientSubmissionError
from .grading import GradingEngine
from .guard import AttemptGuard
from .models import ExamResult, StudentAnswer

logger = logging.getLogger(__name__)


class ResultLedger:
    """
    Records exactly one graded result per (exam, student).

    submit() runs admission, grading, answer storage, pass/fail and
    certificate issuance in one transaction, so readers only ever see a
    finished result or nothing at all. Retrying after a commit yields
    AlreadyTaken rather than a second grading.
    """

    def __init__(self, using=None, guard=None, grader=None, issuer=None):
        self.using = using
        self.guard = guard or AttemptGuard(using=using)
        self.grader = grader or GradingEngine()
        self.issuer = issuer or CertificateIssuer(using=using)

    def submit(self, exam_id, student, answers, elapsed_minutes, now=None):
        answers = self.clean_answers(answers)
        elapsed_minutes = self.clean_elapsed(elapsed_minutes)
        student_id = getattr(student, 'pk', student)
        exam_id = getattr(exam_id, 'pk', exam_id)
        now = now or timezone.now()

        try:
            with transaction.atomic(using=self.using):
                # Re-checked under the row lock, the pre-check in the view is only advisory
                exam = self.guard.get_exam(exam_id, for_update=True)
                self.guard.enforce(exam, student_id, now=now)

                result = self._open_result(exam, student_id, elapsed_minutes)
                report = self.grader.grade(exam.questions.all(), answers, total_points=exam.total_marks)
                StudentAnswer.objects.db_manager(self.using).bulk_create([
                    StudentAnswer(
                        exam_result=result,
                        question_id=graded.question_id,
                        student_answer=graded.given_answer,
                        is_correct=graded.is_correct,
                        marks_obtained=graded.marks_obtained,
                    )
                    for graded in report.answers
                ])

                result.score = report.raw_score
                result.percentage = report.percentage
                if report.percentage >= exam.pass_threshold_percentage:
                    result.status = ExamResult.Status.PASSED
                else:
                    result.status = ExamResult.Status.FAILED
                result.save(using=self.using, update_fields=['score', 'percentage', 'status'])

                AuditLog.record(
                    AuditLog.Action.RESULT_GRADED,
                    result,
                    actor=student_id,
                    details=f"Exam {exam.pk} graded {result.percentage}% ({result.status})",
                    using=self.using,
                )
                if result.is_passed:
                    self.issuer.issue(result, actor=student_id)
                transaction.on_commit(
                    lambda: result_graded.send(sender=ExamResult, exam_result=result),
                    using=self.using,
                )
        except SubmissionRejected as rejection:
            logger.info(
                "Rejected submission for exam %s by student %s: %s",
                exam_id, student_id, rejection.code,
            )
            raise
        except DatabaseError as exc:
            logger.exception("Submission for exam %s by student %s rolled back", exam_id, student_id)
            raise TransientSubmissionError() from exc

        if report.skipped:
            logger.warning(
                "Result %s ignored answers for unknown questions %s", result.pk, report.skipped
            )
        logger.info(
            "Graded exam %s for student %s: %s/%s (%s%%) %s",
            exam_id, student_id, result.score, result.total_marks, result.percentage, result.status,
        )
        result.report = report
        return result

    def _open_result(self, exam, student_id, elapsed_minutes):
        try:
            with transaction.atomic(using=self.using):
                return ExamResult.objects.db_manager(self.using).create(
                    exam=exam,
                    student_id=student_id,
                    score=0,
                    total_marks=exam.total_marks,
                    percentage=0,
                    time_taken=elapsed_minutes,
                    status=ExamResult.Status.PENDING,
                )
        except IntegrityError:
            # Lost the race against a concurrent submission for the same pair
            raise AlreadyTaken()

    @staticmethod
    def clean_answers(answers):
        if answers is None:
            return []
        if isinstance(answers, (str, bytes)) or not isinstance(answers, Sequence):
            raise MalformedSubmission('Answers must be a list.')
        for item in answers:
            if isinstance(item, Mapping):
                if 'question_id' not in item:
                    raise MalformedSubmission('Every answer needs a question_id.')
            elif isinstance(item, (str, bytes)) or not isinstance(item, Sequence) or len(item) != 2:
                raise MalformedSubmission('Answers must be (question_id, answer) pairs.')
        return list(answers)

    @staticmethod
    def clean_elapsed(elapsed_minutes):
        if isinstance(elapsed_minutes, bool):
            raise MalformedSubmission('Elapsed time must be a whole number of minutes.')
        try:
            elapsed_minutes = int(elapsed_minutes)
        except (TypeError, ValueError):
            raise MalformedSubmission('Elapsed time must be a whole number of minutes.')
        if elapsed_minutes < 0:
            raise MalformedSubmission('Elapsed time cannot be negative.')
        return elapsed_minutes

# assessments/models.py
from django.db import models
from django.conf import settings
from exams.models import Exam, Question

class ExamResult(models.Model):
    """A student's single graded attempt at an exam."""
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PASSED = "passed", "Passed"
        FAILED = "failed", "Failed"

    exam = models.ForeignKey(Exam, on_delete=models.CASCADE, related_name='results')
    student = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='exam_results')

    score = models.DecimalField(max_digits=7, decimal_places=2, default=0)
    total_marks = models.PositiveIntegerField()
    percentage = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    # Minutes reported by the client; recorded for ranking only, never used for admission
    time_taken = models.PositiveIntegerField(default=0)
    submitted_at = models.DateTimeField(auto_now_add=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)

    class Meta:
        db_table = 'exam_results'
        ordering = ['-submitted_at']
        constraints = [
            models.UniqueConstraint(fields=['exam', 'student'], name='unique_exam_student'),
        ]
        indexes = [
            models.Index(fields=['exam', '-percentage', 'time_taken'], name='result_exam_rank_idx'),
        ]

    def __str__(self):
        return f"{self.student} - {self.exam.title} ({self.status})"

    @property
    def is_passed(self):
        return self.status == self.Status.PASSED

class StudentAnswer(models.Model):
    exam_result = models.ForeignKey(ExamResult, related_name='answers', on_delete=models.CASCADE)
    question = models.ForeignKey(Question, related_name='student_answers', on_delete=models.CASCADE)

    student_answer = models.TextField(blank=True)
    is_correct = models.BooleanField(default=False)
    # Decimal so free-text partial credit can be stored as awarded
    marks_obtained = models.DecimalField(max_digits=7, decimal_places=2, default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'student_answers'
        ordering = ['question__order', 'question_id']
        constraints = [
            models.UniqueConstraint(fields=['exam_result', 'question'], name='unique_result_question'),
        ]

    def __str__(self):
        return f"Answer to Q{self.question_id} for result {self.exam_result_id}"

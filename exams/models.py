# examination_system/exams/models.py
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q


class Exam(models.Model):
    # Fields frozen once a student result exists; only deactivation is allowed after that
    LOCKED_FIELDS = (
        'title', 'description', 'subject', 'duration_minutes', 'total_marks',
        'passing_marks', 'start_time', 'end_time', 'teacher_id',
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    subject = models.CharField(max_length=255)

    duration_minutes = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    total_marks = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    passing_marks = models.PositiveIntegerField()

    # Absolute, timezone-aware window (stored in UTC)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()

    teacher = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='exams')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'exams'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(passing_marks__lte=F('total_marks')),
                name='exam_passing_within_total',
            ),
            models.CheckConstraint(
                condition=Q(start_time__lt=F('end_time')),
                name='exam_start_before_end',
            ),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        errors = {}
        if self.passing_marks is not None and self.total_marks is not None:
            if self.passing_marks > self.total_marks:
                errors['passing_marks'] = 'Passing marks cannot exceed total marks.'
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            errors['end_time'] = 'End time must be after start time.'
        if errors:
            raise ValidationError(errors)
        self._ensure_unlocked()

    @property
    def pass_threshold_percentage(self):
        """Passing marks expressed as a percentage of the total (unrounded)."""
        if not self.total_marks:
            return Decimal('0')
        return Decimal(self.passing_marks) / Decimal(self.total_marks) * 100

    @property
    def has_results(self):
        return self.pk is not None and self.results.exists()

    def _ensure_unlocked(self, using=None):
        if self.pk is None:
            return
        using = using or self._state.db
        stored = Exam.objects.db_manager(using).filter(pk=self.pk).first()
        if stored is None or not stored.results.exists():
            return
        changed = [name for name in self.LOCKED_FIELDS if getattr(stored, name) != getattr(self, name)]
        if changed or (self.is_active and not stored.is_active):
            raise ValidationError(
                'This exam has been taken by students; it can only be deactivated.'
            )

    def save(self, *args, **kwargs):
        self._ensure_unlocked(kwargs.get('using'))
        super().save(*args, **kwargs)

    def window_status(self, now):
        if now < self.start_time:
            return 'upcoming'
        if now > self.end_time:
            return 'expired'
        return 'available'


class Question(models.Model):
    class QuestionType(models.TextChoices):
        SINGLE_CHOICE = "single_choice", "Single Choice"
        TRUE_FALSE = "true_false", "True / False"
        SHORT_ANSWER = "short_answer", "Short Answer"
        ESSAY = "essay", "Essay"

    CHOICE_TYPES = (QuestionType.SINGLE_CHOICE, QuestionType.TRUE_FALSE)

    exam = models.ForeignKey(Exam, related_name='questions', on_delete=models.CASCADE)

    text = models.TextField()
    question_type = models.CharField(max_length=20, choices=QuestionType.choices)
    # Ordered option labels, choice kinds only
    options = models.JSONField(default=list, blank=True)
    correct_answer = models.TextField()
    points = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'questions'
        ordering = ['exam', 'order', 'id']
        constraints = [
            models.CheckConstraint(condition=Q(points__gte=1), name='question_points_positive'),
        ]

    def __str__(self):
        return f"{self.text[:50]}..."

    @property
    def is_choice(self):
        return self.question_type in self.CHOICE_TYPES

    def clean(self):
        if not (self.correct_answer or '').strip():
            raise ValidationError({'correct_answer': 'A correct answer is required.'})
        if self.is_choice and self.options and self.correct_answer.strip() not in [
            str(opt).strip() for opt in self.options
        ]:
            raise ValidationError({'correct_answer': 'The correct answer must be one of the options.'})

    def _ensure_unlocked(self, using=None):
        # Already-graded attempts must stay consistent with the bank they were scored against
        using = using or self._state.db
        if self.exam_id and Exam.objects.db_manager(using).filter(pk=self.exam_id, results__isnull=False).exists():
            raise ValidationError('Questions cannot change once the exam has been taken.')

    def save(self, *args, **kwargs):
        self._ensure_unlocked(kwargs.get('using'))
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        self._ensure_unlocked(kwargs.get('using'))
        return super().delete(*args, **kwargs)

from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.utils import timezone

from assessments.models import ExamResult
from exams.models import Exam, Question

User = get_user_model()


def make_user(email, role='student', first_name='Test', last_name='User', **extra):
    return User.objects.create_user(
        username=email,
        email=email,
        password='testpass123',
        role=role,
        first_name=first_name,
        last_name=last_name,
        **extra
    )


def choice_question(text, correct, points=10, options=None):
    return {
        'text': text,
        'question_type': Question.QuestionType.SINGLE_CHOICE,
        'options': options or [correct, 'Something else'],
        'correct_answer': correct,
        'points': points,
    }


def essay_question(text, correct, points=10):
    return {
        'text': text,
        'question_type': Question.QuestionType.ESSAY,
        'options': [],
        'correct_answer': correct,
        'points': points,
    }


def make_exam(teacher, questions=None, total_marks=20, passing_marks=10,
              start_time=None, end_time=None, **extra):
    now = timezone.now()
    exam = Exam.objects.create(
        title=extra.pop('title', 'Programming Basics'),
        subject=extra.pop('subject', 'Computer Science'),
        duration_minutes=extra.pop('duration_minutes', 60),
        total_marks=total_marks,
        passing_marks=passing_marks,
        start_time=start_time or now - timedelta(hours=1),
        end_time=end_time or now + timedelta(hours=1),
        teacher=teacher,
        **extra
    )
    if questions is None:
        questions = [
            choice_question('2 + 2 = ?', '4', options=['3', '4', '5']),
            choice_question('Capital of France?', 'Paris', options=['Paris', 'Rome']),
        ]
    for order, question in enumerate(questions, start=1):
        Question.objects.create(exam=exam, order=order, **question)
    return exam


def make_result(exam, student, percentage, time_taken=30, status=None):
    percentage = Decimal(str(percentage))
    if status is None:
        passed = percentage >= exam.pass_threshold_percentage
        status = ExamResult.Status.PASSED if passed else ExamResult.Status.FAILED
    return ExamResult.objects.create(
        exam=exam,
        student=student,
        score=percentage * exam.total_marks / 100,
        total_marks=exam.total_marks,
        percentage=percentage,
        time_taken=time_taken,
        status=status,
    )

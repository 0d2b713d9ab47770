"""
Scoring of a submitted answer set against an exam's question bank.

Choice questions (single choice, true/false) are all-or-nothing exact
matches. Free-text questions (short answer, essay) use a keyword-overlap
heuristic: the canonical answer is split into words, short words are
dropped as stop words, and the share of remaining keywords found inside the
student's answer decides both the partial credit and the correct flag.
The heuristic is known to be approximate; it is the grading policy, not a
bug to be tightened here.
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

from exams.models import Question

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
WHOLE = Decimal('1')


def round_half_up(value, exponent=WHOLE):
    return Decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def compute_percentage(raw_score, total_points):
    if not total_points:
        return Decimal('0.00')
    return round_half_up(Decimal(raw_score) / Decimal(total_points) * 100, TWO_PLACES)


def keyword_match_fraction(canonical_answer, given_answer, min_length):
    keywords = [word for word in canonical_answer.lower().split() if len(word) >= min_length]
    if not keywords:
        return Decimal('0')
    haystack = given_answer.lower()
    matched = sum(1 for keyword in keywords if keyword in haystack)
    return Decimal(matched) / Decimal(len(keywords))


@dataclass(frozen=True)
class GradedAnswer:
    question_id: int
    given_answer: str
    is_correct: bool
    marks_obtained: Decimal
    answered: bool = True


@dataclass
class GradingReport:
    answers: list
    raw_score: Decimal
    total_points: Decimal
    percentage: Decimal
    # Question ids present in the submission but unknown to the bank
    skipped: list = field(default_factory=list)

    @property
    def correct_count(self):
        return sum(1 for answer in self.answers if answer.is_correct)

    @property
    def total_questions(self):
        return len(self.answers)


class GradingEngine:
    def __init__(self, pass_ratio=None, keyword_min_length=None):
        config = getattr(settings, 'EXAMS', {})
        if pass_ratio is None:
            pass_ratio = config.get('FREE_TEXT_PASS_RATIO', 0.70)
        if keyword_min_length is None:
            keyword_min_length = config.get('KEYWORD_MIN_LENGTH', 4)
        self.pass_ratio = Decimal(str(pass_ratio))
        self.keyword_min_length = int(keyword_min_length)

    def grade(self, questions, answers, total_points=None):
        questions = list(questions)
        known_ids = {question.pk for question in questions}
        given, skipped = self._index_answers(answers, known_ids)

        graded = []
        raw_score = Decimal('0')
        for question in questions:
            if question.pk in given:
                result = self.grade_question(question, given[question.pk])
            else:
                result = GradedAnswer(question.pk, '', False, Decimal('0'), answered=False)
            graded.append(result)
            raw_score += result.marks_obtained

        if total_points is None:
            total_points = sum(question.points for question in questions)
        total_points = Decimal(total_points)

        return GradingReport(
            answers=graded,
            raw_score=raw_score,
            total_points=total_points,
            percentage=compute_percentage(raw_score, total_points),
            skipped=skipped,
        )

    def grade_question(self, question, given_answer):
        points = Decimal(question.points)
        if question.question_type in Question.CHOICE_TYPES:
            is_correct = given_answer.strip() == (question.correct_answer or '').strip()
            marks = points if is_correct else Decimal('0')
        else:
            fraction = keyword_match_fraction(
                question.correct_answer or '', given_answer, self.keyword_min_length
            )
            marks = round_half_up(points * fraction)
            is_correct = fraction >= self.pass_ratio
        return GradedAnswer(question.pk, given_answer, is_correct, marks)

    def _index_answers(self, answers, known_ids):
        given = {}
        skipped = []
        for item in answers or ():
            if isinstance(item, Mapping):
                question_id = item.get('question_id')
                answer = item.get('answer', item.get('student_answer'))
            else:
                question_id, answer = item
            try:
                question_id = int(question_id)
            except (TypeError, ValueError):
                question_id = None

            if question_id not in known_ids:
                logger.warning("Skipping answer for unknown question %r", item)
                skipped.append(question_id)
                continue
            if question_id in given:
                # First answer for a question wins
                continue
            given[question_id] = '' if answer is None else str(answer)
        return given, skipped

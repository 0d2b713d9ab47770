from dataclasses import dataclass
from decimal import Decimal

from django.db.models import Avg, Count, Q

from .grading import TWO_PLACES, round_half_up
from .models import ExamResult


def competition_rank(rows, key):
    """
    Standard competition ranking ("1224") over rows that are already sorted.

    Rows with an equal key share a rank; the next distinct key gets
    1 + the number of rows strictly ahead of it.
    """
    ranked = []
    previous_key = object()
    rank = 0
    for position, row in enumerate(rows, start=1):
        current_key = key(row)
        if current_key != previous_key:
            rank = position
            previous_key = current_key
        ranked.append((rank, row))
    return ranked


@dataclass(frozen=True)
class RankingEntry:
    rank: int
    student_id: int
    student_name: str
    roll_number: str
    percentage: Decimal
    elapsed_minutes: int
    status: str


@dataclass(frozen=True)
class StudentStanding:
    rank: int
    student_id: int
    student_name: str
    roll_number: str
    average_percentage: Decimal
    total_exams: int
    passed_exams: int
    total_students: int = 0


class RankingService:
    """Read-only rankings computed on demand from graded results."""

    def __init__(self, using=None):
        self.using = using

    @property
    def results(self):
        return ExamResult.objects.db_manager(self.using).exclude(status=ExamResult.Status.PENDING)

    def rank_within_exam(self, exam_id):
        rows = (
            self.results.filter(exam_id=exam_id)
            .select_related('student')
            .order_by('-percentage', 'time_taken', 'student_id')
        )
        return [
            RankingEntry(
                rank=rank,
                student_id=result.student_id,
                student_name=result.student.display_name,
                roll_number=result.student.roll_number,
                percentage=result.percentage,
                elapsed_minutes=result.time_taken,
                status=result.status,
            )
            for rank, result in competition_rank(rows, key=lambda r: (r.percentage, r.time_taken))
        ]

    def class_ranking(self):
        """Every student with at least one graded result, ranked by average percentage."""
        aggregates = (
            self.results.values(
                'student_id', 'student__first_name', 'student__last_name',
                'student__email', 'student__roll_number',
            )
            .annotate(
                average=Avg('percentage'),
                total_exams=Count('id'),
                passed_exams=Count('id', filter=Q(status=ExamResult.Status.PASSED)),
            )
        )
        rows = []
        for row in aggregates:
            name = f"{row['student__first_name']} {row['student__last_name']}".strip()
            rows.append({
                'student_id': row['student_id'],
                'student_name': name or row['student__email'],
                'roll_number': row['student__roll_number'],
                'average_percentage': round_half_up(Decimal(str(row['average'])), TWO_PLACES),
                'total_exams': row['total_exams'],
                'passed_exams': row['passed_exams'],
            })
        rows.sort(key=lambda r: (-r['average_percentage'], r['student_id']))

        total_students = len(rows)
        return [
            StudentStanding(rank=rank, total_students=total_students, **row)
            for rank, row in competition_rank(rows, key=lambda r: r['average_percentage'])
        ]

    def rank_across_exams(self, student_id):
        student_id = getattr(student_id, 'pk', student_id)
        for standing in self.class_ranking():
            if standing.student_id == student_id:
                return standing
        return None

from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase

from assessments.models import ExamResult
from assessments.ranking import RankingService, competition_rank
from .helpers import make_exam, make_result, make_user


class CompetitionRankTests(SimpleTestCase):
    def test_ties_share_rank_and_skip_the_next(self):
        ranked = competition_rank([90, 80, 80, 70], key=lambda value: value)
        self.assertEqual([rank for rank, _ in ranked], [1, 2, 2, 4])

    def test_empty(self):
        self.assertEqual(competition_rank([], key=lambda value: value), [])


class RankingServiceTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher@example.com', role='teacher')
        self.alice = make_user('alice@example.com', first_name='Alice', last_name='A', roll_number='R1')
        self.bob = make_user('bob@example.com', first_name='Bob', last_name='B', roll_number='R2')
        self.carol = make_user('carol@example.com', first_name='Carol', last_name='C', roll_number='R3')
        self.dave = make_user('dave@example.com', first_name='Dave', last_name='D', roll_number='R4')
        self.exam = make_exam(self.teacher)
        self.service = RankingService()

    def test_rank_within_exam_breaks_ties_on_time(self):
        make_result(self.exam, self.alice, 90, time_taken=30)
        make_result(self.exam, self.bob, 90, time_taken=30)
        make_result(self.exam, self.carol, 90, time_taken=40)
        make_result(self.exam, self.dave, 70, time_taken=10)

        ranking = self.service.rank_within_exam(self.exam.pk)

        self.assertEqual([entry.rank for entry in ranking], [1, 1, 3, 4])
        self.assertEqual(
            [entry.student_id for entry in ranking],
            [self.alice.pk, self.bob.pk, self.carol.pk, self.dave.pk],
        )
        self.assertEqual(ranking[0].student_name, 'Alice A')
        self.assertEqual(ranking[0].roll_number, 'R1')
        self.assertEqual(ranking[3].status, ExamResult.Status.PASSED)

    def test_pending_results_are_not_ranked(self):
        make_result(self.exam, self.alice, 90)
        make_result(self.exam, self.bob, 0, status=ExamResult.Status.PENDING)
        ranking = self.service.rank_within_exam(self.exam.pk)
        self.assertEqual([entry.student_id for entry in ranking], [self.alice.pk])

    def test_rank_within_exam_without_results(self):
        self.assertEqual(self.service.rank_within_exam(self.exam.pk), [])

    def test_class_ranking_uses_average_percentage(self):
        second = make_exam(self.teacher, title='Second')
        make_result(self.exam, self.alice, 80)
        make_result(second, self.alice, 60)
        make_result(self.exam, self.bob, 70)
        make_result(self.exam, self.carol, 90)
        make_result(second, self.carol, 40)

        ranking = self.service.class_ranking()

        self.assertEqual(
            [(s.student_id, s.rank) for s in ranking],
            [(self.alice.pk, 1), (self.bob.pk, 1), (self.carol.pk, 3)],
        )
        alice = ranking[0]
        self.assertEqual(alice.average_percentage, Decimal('70.00'))
        self.assertEqual(alice.total_exams, 2)
        self.assertEqual(alice.passed_exams, 2)
        self.assertEqual(alice.total_students, 3)

    def test_rank_across_exams(self):
        make_result(self.exam, self.alice, 80)
        make_result(self.exam, self.bob, 95)

        standing = self.service.rank_across_exams(self.alice)
        self.assertEqual(standing.rank, 2)
        self.assertEqual(standing.total_students, 2)
        self.assertIsNone(self.service.rank_across_exams(self.dave.pk))


class ExamRankingCommandTests(TestCase):
    def test_prints_exam_ranking(self):
        teacher = make_user('teacher@example.com', role='teacher')
        student = make_user('alice@example.com', first_name='Alice', last_name='A')
        exam = make_exam(teacher)
        make_result(exam, student, 75)

        out = StringIO()
        call_command('exam_ranking', exam.pk, stdout=out)
        self.assertIn('Alice A', out.getvalue())
        self.assertIn('75.00', out.getvalue())

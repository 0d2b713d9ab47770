from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from assessments.exceptions import AlreadyTaken, ExamInactive, ExamNotFound, Expired, NotYetOpen
from assessments.guard import Admission, AttemptGuard
from .helpers import make_exam, make_result, make_user


class AttemptGuardTests(TestCase):
    def setUp(self):
        self.teacher = make_user('teacher@example.com', role='teacher')
        self.student = make_user('student@example.com')
        self.now = timezone.now()
        self.exam = make_exam(
            self.teacher,
            start_time=self.now - timedelta(hours=1),
            end_time=self.now + timedelta(hours=1),
        )
        self.guard = AttemptGuard()

    def test_admits_inside_window(self):
        self.assertEqual(self.guard.check(self.exam, self.student, now=self.now), Admission.ADMITTED)

    def test_window_bounds_are_inclusive(self):
        self.assertEqual(
            self.guard.check(self.exam, self.student, now=self.exam.start_time), Admission.ADMITTED
        )
        self.assertEqual(
            self.guard.check(self.exam, self.student, now=self.exam.end_time), Admission.ADMITTED
        )

    def test_before_start(self):
        moment = self.exam.start_time - timedelta(seconds=1)
        self.assertEqual(self.guard.check(self.exam, self.student, now=moment), Admission.NOT_YET_OPEN)
        with self.assertRaises(NotYetOpen):
            self.guard.enforce(self.exam, self.student, now=moment)

    def test_after_end(self):
        moment = self.exam.end_time + timedelta(seconds=1)
        self.assertEqual(self.guard.check(self.exam, self.student, now=moment), Admission.EXPIRED)
        with self.assertRaises(Expired):
            self.guard.enforce(self.exam, self.student, now=moment)

    def test_inactive_exam(self):
        self.exam.is_active = False
        self.exam.save()
        with self.assertRaises(ExamInactive):
            self.guard.enforce(self.exam.pk, self.student, now=self.now)

    def test_already_taken(self):
        make_result(self.exam, self.student, 80)
        self.assertEqual(self.guard.check(self.exam, self.student, now=self.now), Admission.ALREADY_TAKEN)
        with self.assertRaises(AlreadyTaken):
            self.guard.enforce(self.exam, self.student.pk, now=self.now)

    def test_already_taken_wins_over_expired(self):
        make_result(self.exam, self.student, 80)
        later = self.exam.end_time + timedelta(days=1)
        self.assertEqual(self.guard.check(self.exam, self.student, now=later), Admission.ALREADY_TAKEN)

    def test_other_students_are_unaffected(self):
        make_result(self.exam, self.student, 80)
        other = make_user('other@example.com')
        self.assertEqual(self.guard.check(self.exam, other, now=self.now), Admission.ADMITTED)

    def test_unknown_exam(self):
        with self.assertRaises(ExamNotFound):
            self.guard.check(self.exam.pk + 100, self.student)
        with self.assertRaises(ExamNotFound):
            self.guard.check('not-an-id', self.student)

import threading

from django.db import connection
from django.test import TransactionTestCase, skipUnlessDBFeature

from assessments.exceptions import AlreadyTaken
from assessments.ledger import ResultLedger
from assessments.models import ExamResult, StudentAnswer
from certificates.models import Certificate
from .helpers import make_exam, make_user
from .test_ledger import StaleGuard


@skipUnlessDBFeature('has_select_for_update')
class ConcurrentSubmissionTests(TransactionTestCase):
    workers = 5

    def setUp(self):
        teacher = make_user('teacher@example.com', role='teacher')
        self.student = make_user('student@example.com')
        self.exam = make_exam(teacher)
        self.answers = [(question.pk, question.correct_answer) for question in self.exam.questions.all()]

    def race(self, make_ledger):
        barrier = threading.Barrier(self.workers)
        outcomes = []
        lock = threading.Lock()

        def submit():
            try:
                barrier.wait()
                try:
                    result = make_ledger().submit(self.exam.pk, self.student.pk, self.answers, 10)
                    outcome = result.pk
                except AlreadyTaken:
                    outcome = 'already_taken'
                with lock:
                    outcomes.append(outcome)
            finally:
                connection.close()

        threads = [threading.Thread(target=submit) for _ in range(self.workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return outcomes

    def assert_single_result(self, outcomes):
        self.assertEqual(len(outcomes), self.workers)
        self.assertEqual(outcomes.count('already_taken'), self.workers - 1)
        self.assertEqual(ExamResult.objects.count(), 1)
        self.assertEqual(StudentAnswer.objects.count(), 2)
        self.assertEqual(Certificate.objects.count(), 1)

    def test_only_one_submission_is_recorded(self):
        self.assert_single_result(self.race(ResultLedger))

    def test_unique_constraint_holds_without_the_precheck(self):
        self.assert_single_result(self.race(lambda: ResultLedger(guard=StaleGuard())))

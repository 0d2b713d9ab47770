from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from assessments.ledger import ResultLedger
from .helpers import make_exam, make_result, make_user


class ResultsApiTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher@example.com', role='teacher')
        self.other_teacher = make_user('other.teacher@example.com', role='teacher')
        self.student = make_user('student@example.com', first_name='Alice', last_name='A')
        self.classmate = make_user('classmate@example.com', first_name='Bob', last_name='B')
        self.exam = make_exam(self.teacher)
        q1, q2 = self.exam.questions.all()
        self.result = ResultLedger().submit(
            self.exam.pk, self.student, [(q1.pk, '4'), (q2.pk, 'Paris')], 20
        )
        make_result(self.exam, self.classmate, 50, time_taken=30)

    def test_student_results_with_statistics(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(reverse('student-results'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['results']), 1)
        self.assertIsNotNone(response.data['results'][0]['certificate_number'])
        self.assertEqual(response.data['statistics']['total_exams'], 1)
        self.assertEqual(response.data['statistics']['passed_exams'], 1)

    def test_teacher_cannot_use_student_results(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(reverse('student-results'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_teacher_results_grouped_by_exam(self):
        self.client.force_authenticate(user=self.teacher)
        response = self.client.get(reverse('teacher-results'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entry = response.data['exam_results'][self.exam.pk]
        self.assertEqual(entry['exam_title'], self.exam.title)
        self.assertEqual(len(entry['students']), 2)
        self.assertEqual(entry['statistics']['total_students'], 2)
        self.assertNotIn('results', entry)

    def test_other_teacher_sees_nothing(self):
        self.client.force_authenticate(user=self.other_teacher)
        response = self.client.get(reverse('teacher-results'))
        self.assertEqual(response.data['exam_results'], {})

    def test_result_detail_for_own_result(self):
        self.client.force_authenticate(user=self.student)
        url = reverse('result-detail', args=[self.exam.pk, self.student.pk])
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['result']['answers']), 2)
        self.assertEqual(
            response.data['certificate']['certificate_number'],
            self.result.certificate.certificate_number,
        )

    def test_result_detail_of_someone_else_is_denied(self):
        self.client.force_authenticate(user=self.student)
        url = reverse('result-detail', args=[self.exam.pk, self.classmate.pk])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.other_teacher)
        url = reverse('result-detail', args=[self.exam.pk, self.student.pk])
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_exam_ranking(self):
        self.client.force_authenticate(user=self.classmate)
        response = self.client.get(reverse('exam-ranking', args=[self.exam.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        ranking = response.data['ranking']
        self.assertEqual([row['rank'] for row in ranking], [1, 2])
        self.assertEqual(ranking[0]['student_id'], self.student.pk)
        self.assertEqual(ranking[0]['time_taken'], 20)

    def test_exam_ranking_requires_participation(self):
        outsider = make_user('outsider@example.com')
        self.client.force_authenticate(user=outsider)
        response = self.client.get(reverse('exam-ranking', args=[self.exam.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_class_ranking_includes_own_standing(self):
        self.client.force_authenticate(user=self.classmate)
        response = self.client.get(reverse('class-ranking'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['class_ranking']), 2)
        self.assertEqual(response.data['student_rank']['rank'], 2)

    def test_analytics(self):
        self.client.force_authenticate(user=self.student)
        response = self.client.get(reverse('student-analytics'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        subjects = response.data['subject_performance']
        self.assertEqual(subjects[0]['subject'], self.exam.subject)
        self.assertEqual(str(subjects[0]['average_percentage']), '100.00')
        self.assertEqual(response.data['question_type_performance'][0]['correct_answers'], 2)

    def test_anonymous_is_rejected(self):
        response = self.client.get(reverse('student-results'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

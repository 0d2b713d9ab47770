from datetime import timedelta

from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from assessments.tests.helpers import make_exam, make_user
from cores.models import AuditLog


class AuditLogTests(APITestCase):
    def setUp(self):
        self.teacher = make_user('teacher@example.com', role='teacher')
        self.admin = make_user('admin@example.com', is_staff=True)
        self.exam = make_exam(self.teacher)
        AuditLog.record(AuditLog.Action.EXAM_CREATED, self.exam, actor=self.teacher, details='created')
        AuditLog.record(AuditLog.Action.EXAM_UPDATED, self.exam, actor=self.teacher.pk, details='updated')

    def test_record_stores_target(self):
        log = AuditLog.objects.filter(action=AuditLog.Action.EXAM_UPDATED).get()
        self.assertEqual(log.target_model, 'Exam')
        self.assertEqual(log.target_object_id, str(self.exam.pk))
        self.assertEqual(log.actor, self.teacher)

    def test_staff_only(self):
        self.client.force_authenticate(user=self.teacher)
        self.assertEqual(self.client.get(reverse('audit-logs')).status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_action(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('audit-logs'), {'action': AuditLog.Action.EXAM_CREATED})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['actor_email'], 'teacher@example.com')

    def test_filter_since(self):
        self.client.force_authenticate(user=self.admin)
        future = (timezone.now() + timedelta(hours=1)).isoformat()
        response = self.client.get(reverse('audit-logs'), {'since': future})
        self.assertEqual(response.data, [])

        response = self.client.get(reverse('audit-logs'), {'since': 'yesterday'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

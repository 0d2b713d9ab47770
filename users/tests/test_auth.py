from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import AccessToken

User = get_user_model()


class AuthTests(APITestCase):
    def test_register_student_by_default(self):
        response = self.client.post(reverse('register'), {
            'email': 'new@example.com',
            'password': 'longenough1',
            'first_name': 'New',
            'last_name': 'Student',
            'roll_number': 'S-42',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email='new@example.com')
        self.assertTrue(user.is_student)
        self.assertEqual(user.roll_number, 'S-42')
        self.assertTrue(user.check_password('longenough1'))

    def test_register_rejects_short_password_and_duplicate_email(self):
        response = self.client.post(reverse('register'), {
            'email': 'new@example.com', 'password': 'short',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        User.objects.create_user(username='taken@example.com', email='taken@example.com', password='whatever123')
        response = self.client.post(reverse('register'), {
            'email': 'taken@example.com', 'password': 'longenough1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_with_email_returns_role_claim(self):
        User.objects.create_user(
            username='teacher@example.com', email='teacher@example.com',
            password='testpass123', role=User.Role.TEACHER,
        )
        response = self.client.post(reverse('login'), {
            'email': 'teacher@example.com', 'password': 'testpass123',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['role'], 'teacher')
        self.assertEqual(AccessToken(response.data['access'])['role'], 'teacher')

    def test_login_with_wrong_password(self):
        User.objects.create_user(username='a@example.com', email='a@example.com', password='testpass123')
        response = self.client.post(reverse('login'), {
            'email': 'a@example.com', 'password': 'wrong-password',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile_update_keeps_role(self):
        user = User.objects.create_user(username='a@example.com', email='a@example.com', password='testpass123')
        self.client.force_authenticate(user=user)
        response = self.client.patch(reverse('user-profile'), {
            'department': 'Physics', 'role': 'teacher',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        user.refresh_from_db()
        self.assertEqual(user.department, 'Physics')
        self.assertTrue(user.is_student)

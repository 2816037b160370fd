from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse

User = get_user_model()


class CustomUserTest(TestCase):
    def test_default_role_is_gate(self):
        user = User.objects.create_user(username='new', password='pass12345')
        self.assertEqual(user.role, User.Role.GATE)
        self.assertTrue(user.has_camp_role(User.Role.GATE))
        self.assertFalse(user.has_camp_role(User.Role.ADMIN, User.Role.ACCOUNTS))

    def test_superuser_holds_every_role(self):
        admin = User.objects.create_superuser(username='root', password='pass12345')
        self.assertTrue(admin.has_camp_role(User.Role.ACCOUNTS))

    def test_str_shows_role(self):
        user = User.objects.create_user(
            username='acc', first_name='Mary', last_name='Wambui', role=User.Role.ACCOUNTS,
        )
        self.assertEqual(str(user), 'Mary Wambui (Accounts / Billing)')


class SessionLoginTest(TestCase):
    def setUp(self):
        User.objects.create_user(username='gate1', password='pass12345', is_staff=True)
        User.objects.create_user(username='parent', password='pass12345')

    def test_staff_login_and_me(self):
        response = self.client.post(reverse('login'), {'username': 'gate1', 'password': 'pass12345'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['role'], 'gate')
        self.assertEqual(self.client.get(reverse('me')).json()['username'], 'gate1')

        self.client.post(reverse('logout'))
        self.assertEqual(self.client.get(reverse('me')).status_code, 401)

    def test_non_staff_cannot_log_in(self):
        response = self.client.post(reverse('login'), {'username': 'parent', 'password': 'pass12345'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 401)

    def test_wrong_password(self):
        response = self.client.post(reverse('login'), {'username': 'gate1', 'password': 'nope'},
                                    content_type='application/json')
        self.assertEqual(response.status_code, 401)

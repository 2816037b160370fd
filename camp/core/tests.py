from django.test import RequestFactory, TestCase
from django.urls import reverse

from accounts.models import CustomUser

from . import exceptions
from .testing import make_staff
from .utils import error_response, handles_camp_errors, staff_required


class ErrorResponseTest(TestCase):
    def test_status_per_family(self):
        cases = [
            (exceptions.ConsentRequiredError(), 400),
            (exceptions.RegistrationNotFound(), 404),
            (exceptions.AlreadyCheckedInError(), 409),
            (exceptions.ExportRenderingError(), 502),
        ]
        for exc, status in cases:
            self.assertEqual(error_response(exc).status_code, status, exc.code)

    def test_payload_carries_code_and_context(self):
        exc = exceptions.UnknownDateError('Not offered.', date='2026-12-25')
        self.assertEqual(exc.as_dict(), {
            'error': 'unknown_date', 'message': 'Not offered.', 'date': '2026-12-25',
        })


class StaffRequiredTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()

        @staff_required(CustomUser.Role.ACCOUNTS)
        @handles_camp_errors
        def view(req):
            raise exceptions.ActionItemNotFound()

        self.view = view

    def _call(self, user):
        req = self.factory.get('/')
        req.user = user
        return self.view(req)

    def test_non_staff_user(self):
        user = CustomUser.objects.create_user(username='guardian', password='pass12345')
        self.assertEqual(self._call(user).status_code, 403)

    def test_wrong_role(self):
        self.assertEqual(self._call(make_staff('gate1')).status_code, 403)

    def test_right_role_reaches_view(self):
        staff = make_staff('acc1', role=CustomUser.Role.ACCOUNTS)
        self.assertEqual(self._call(staff).status_code, 404)


class HealthViewTest(TestCase):
    def test_health(self):
        self.assertEqual(self.client.get(reverse('health')).json(), {'status': 'ok'})

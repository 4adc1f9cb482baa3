import base64
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase, override_settings
from rest_framework.test import APITestCase

from lms_core.models import Course, CourseModule, Enrollment
from ..exceptions import IntegrityAdvocateAPIError
from ..models import IntegrityAdvocateBlock
from ..overrides import clean_override_reason, set_override, NO_REASON

User = get_user_model()

API_KEY = base64.b64encode(b'block-secret').decode()
APP_ID = '0b7bb2c4-5f3e-4d3c-9a2a-1d2f3e4a5b6c'
OVERRIDE_OFF = {'CACHE': False, 'SESSION_STATUS_OVERRIDE': False, 'STATUS_EMAILS': False}


class CleanOverrideReasonTests(TestCase):
    def test_strips_disallowed_characters(self):
        self.assertEqual(clean_override_reason('ID ok, <b>verified</b>!'), 'ID ok, bverifiedb')

    def test_truncates(self):
        self.assertEqual(len(clean_override_reason('a' * 100)), 32)

    def test_empty_reason_gets_default(self):
        self.assertEqual(clean_override_reason(''), NO_REASON)
        self.assertEqual(clean_override_reason('<>!!'), NO_REASON)
        self.assertEqual(clean_override_reason(None), NO_REASON)


class OverrideFixtureMixin:
    def make_fixtures(self):
        self.course = Course.objects.create(shortname='HIS200', fullname='History')
        self.module = CourseModule.objects.create(
            course=self.course, name='Essay exam', completion=CourseModule.COMPLETION_TRACKING_AUTOMATIC)
        self.block = IntegrityAdvocateBlock.objects.create(
            course=self.course, module=self.module, api_key=API_KEY, app_id=APP_ID)
        self.student = User.objects.create_user(username='pupil', password='pw')
        Enrollment.objects.create(user=self.student, course=self.course)
        self.instructor = User.objects.create_user(username='prof', password='pw', first_name='Ida', last_name='Wells')
        self.instructor.user_permissions.add(Permission.objects.get(codename='override_session'))

    def call(self, **overrides):
        kwargs = {
            'status': 3,
            'reason': 'Left the room',
            'target_user_id': self.student.pk,
            'override_user_id': self.instructor.pk,
            'block_instance_id': self.block.pk,
            'module_id': self.module.pk,
            'requesting_user': self.instructor,
        }
        kwargs.update(overrides)
        return set_override(**kwargs)


@patch('integrity_advocate.overrides.IntegrityAdvocateAPI.set_override_session', return_value=True)
class SetOverrideTests(OverrideFixtureMixin, TestCase):
    def setUp(self):
        self.make_fixtures()

    def test_successful_override(self, mock_set):
        result = self.call(reason='Left the room <again>')
        self.assertEqual(result, {'submitted': True, 'success': True, 'warnings': []})
        args = mock_set.call_args[0]
        self.assertEqual(args[2], 3)
        self.assertEqual(args[3], 'Left the room again')
        self.assertEqual(args[4], self.student.pk)
        self.assertEqual(args[6:], (self.course.pk, self.module.pk))

    def assertRejected(self, result, mock_set):
        self.assertFalse(result['submitted'])
        self.assertFalse(result['success'])
        self.assertEqual(len(result['warnings']), 1)
        mock_set.assert_not_called()

    @override_settings(INTEGRITYADVOCATE_FEATURES=OVERRIDE_OFF)
    def test_feature_disabled(self, mock_set):
        self.assertRejected(self.call(), mock_set)

    def test_must_override_as_self(self, mock_set):
        self.assertRejected(self.call(requesting_user=self.student), mock_set)

    def test_status_must_be_overridable(self, mock_set):
        self.assertRejected(self.call(status=2), mock_set)

    def test_unknown_block(self, mock_set):
        self.assertRejected(self.call(block_instance_id=99999), mock_set)

    def test_misconfigured_block(self, mock_set):
        self.block.api_key = 'not base64!'
        self.block.save()
        self.assertRejected(self.call(), mock_set)

    def test_hidden_block(self, mock_set):
        self.block.visible = False
        self.block.save()
        self.assertRejected(self.call(), mock_set)

    def test_target_not_enrolled(self, mock_set):
        stranger = User.objects.create_user(username='stranger')
        self.assertRejected(self.call(target_user_id=stranger.pk), mock_set)

    def test_module_outside_course(self, mock_set):
        other = CourseModule.objects.create(course=Course.objects.create(shortname='O', fullname='O'), name='x')
        self.assertRejected(self.call(module_id=other.pk), mock_set)

    def test_module_without_block(self, mock_set):
        plain = CourseModule.objects.create(course=self.course, name='Reading')
        self.assertRejected(self.call(module_id=plain.pk), mock_set)

    def test_requires_permission(self, mock_set):
        self.instructor.user_permissions.clear()
        self.assertRejected(self.call(), mock_set)

    def test_remote_failure_reported(self, mock_set):
        mock_set.side_effect = IntegrityAdvocateAPIError('server down')
        result = self.call()
        self.assertTrue(result['submitted'])
        self.assertFalse(result['success'])
        self.assertEqual(len(result['warnings']), 1)


class SetOverrideViewTests(OverrideFixtureMixin, APITestCase):
    def setUp(self):
        self.make_fixtures()

    def payload(self, **overrides):
        data = {
            'status': 0,
            'reason': 'ID confirmed',
            'target_user_id': self.student.pk,
            'override_user_id': self.instructor.pk,
            'block_instance_id': self.block.pk,
            'module_id': self.module.pk,
        }
        data.update(overrides)
        return data

    @patch('integrity_advocate.overrides.IntegrityAdvocateAPI.set_override_session', return_value=True)
    def test_post_override(self, mock_set):
        self.client.force_authenticate(user=self.instructor)
        resp = self.client.post('/api/integrity-advocate/override/', self.payload(), format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {'submitted': True, 'success': True, 'warnings': []})
        mock_set.assert_called_once()

    @patch('integrity_advocate.overrides.IntegrityAdvocateAPI.set_override_session', return_value=True)
    def test_warnings_returned_not_raised(self, mock_set):
        self.client.force_authenticate(user=self.student)
        resp = self.client.post('/api/integrity-advocate/override/', self.payload(), format='json')
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()['success'])
        mock_set.assert_not_called()

    def test_malformed_request_is_400(self):
        self.client.force_authenticate(user=self.instructor)
        resp = self.client.post('/api/integrity-advocate/override/', {'status': 'abc'}, format='json')
        self.assertEqual(resp.status_code, 400)

    def test_requires_authentication(self):
        resp = self.client.post('/api/integrity-advocate/override/', self.payload(), format='json')
        self.assertIn(resp.status_code, (401, 403))

    def test_block_list_for_admins(self):
        admin = User.objects.create_superuser(username='root', password='pw', email='root@example.com')
        self.client.force_authenticate(user=admin)
        resp = self.client.get('/api/integrity-advocate/blocks/')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()[0]['config_errors'], [])
        self.assertNotIn('api_key', resp.json()[0])

    def test_block_list_course_filter_includes_module_only_blocks(self):
        module_only = IntegrityAdvocateBlock.objects.create(module=self.module, api_key=API_KEY, app_id=APP_ID)
        elsewhere = Course.objects.create(shortname='ELS', fullname='Elsewhere')
        IntegrityAdvocateBlock.objects.create(course=elsewhere, api_key=API_KEY, app_id=APP_ID)
        admin = User.objects.create_superuser(username='root', password='pw', email='root@example.com')
        self.client.force_authenticate(user=admin)
        resp = self.client.get('/api/integrity-advocate/blocks/', {'course': self.course.pk})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(sorted(b['id'] for b in resp.json()), sorted([self.block.pk, module_only.pk]))

from django.test import SimpleTestCase
from ..exceptions import InvalidStatusError
from ..status import ParticipantStatus


class ParticipantStatusTests(SimpleTestCase):
    def test_parse_known_strings(self):
        self.assertEqual(ParticipantStatus.parse_status_string('Valid'), 0)
        self.assertEqual(ParticipantStatus.parse_status_string('In Progress'), -1)
        self.assertEqual(ParticipantStatus.parse_status_string('Invalid (ID)'), 1)
        self.assertEqual(ParticipantStatus.parse_status_string('Invalid (Rules)'), 2)
        self.assertEqual(ParticipantStatus.parse_status_string(' invalid (rules) '), 2)
        self.assertEqual(ParticipantStatus.parse_status_string('Invalid'), ParticipantStatus.INVALID_OVERRIDE_INT)

    def test_parse_unknown_raises(self):
        with self.assertRaises(InvalidStatusError):
            ParticipantStatus.parse_status_string('Pending review')
        with self.assertRaises(InvalidStatusError):
            ParticipantStatus.parse_status_string('')

    def test_status_string_roundtrip(self):
        for name, value in ParticipantStatus.STATUSES.items():
            self.assertEqual(ParticipantStatus.get_status_string(value), name)
        with self.assertRaises(InvalidStatusError):
            ParticipantStatus.get_status_string(42)

    def test_override_statuses(self):
        self.assertTrue(ParticipantStatus.is_override_status(0))
        self.assertTrue(ParticipantStatus.is_override_status(3))
        self.assertFalse(ParticipantStatus.is_override_status(1))
        self.assertFalse(ParticipantStatus.is_override_status(-1))
        self.assertFalse(ParticipantStatus.is_override_status(True))
        self.assertFalse(ParticipantStatus.is_override_status('0'))

    def test_valid_and_invalid_groups(self):
        self.assertTrue(ParticipantStatus.is_valid_status(0))
        self.assertTrue(ParticipantStatus.is_inprogress_status(-1))
        for value in (1, 2, 3):
            self.assertTrue(ParticipantStatus.is_invalid_status(value))
        self.assertFalse(ParticipantStatus.is_invalid_status(0))

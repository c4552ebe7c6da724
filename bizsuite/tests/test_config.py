from django.conf import settings
from django.test import SimpleTestCase

from bizsuite import settings as base_settings


class SettingsTests(SimpleTestCase):
    def test_workflow_defaults(self):
        self.assertEqual(settings.APPROVAL_CHAIN_VERSION, "v1")
        self.assertEqual(settings.NOTIFICATION_FEED_LIMIT, 20)

    def test_no_outgoing_mail_configured(self):
        self.assertFalse(hasattr(base_settings, "EMAIL_BACKEND"))
        self.assertFalse(hasattr(base_settings, "DEFAULT_FROM_EMAIL"))
        self.assertEqual(settings.DEFAULT_FROM_EMAIL, "webmaster@localhost")

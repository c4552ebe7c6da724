from types import SimpleNamespace

from django.test import SimpleTestCase

from bizsuite.exceptions import WorkflowConflict
from bizsuite.transitions import check_version


class CheckVersionTests(SimpleTestCase):
    def setUp(self):
        meta = SimpleNamespace(model_name="requisition")
        self.instance = SimpleNamespace(pk=7, version=3, _meta=meta)

    def test_missing_token_is_accepted(self):
        check_version(self.instance, None)

    def test_matching_token(self):
        check_version(self.instance, "3")

    def test_stale_token(self):
        with self.assertRaises(WorkflowConflict) as ctx:
            check_version(self.instance, 2)
        self.assertEqual(ctx.exception.detail["current_version"], "3")

    def test_garbage_token(self):
        with self.assertRaises(WorkflowConflict):
            check_version(self.instance, "abc")

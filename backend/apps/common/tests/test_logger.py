import unittest

from apps.common.logger import AppLogger, get_logger


class AppLoggerTests(unittest.TestCase):
    def test_bind_merges_context_without_mutating_parent(self):
        base = get_logger("apps.tests.logger").bind(component="carts")
        child = base.bind(user_id=7)
        self.assertEqual(base.context, {"component": "carts"})
        self.assertEqual(child.context, {"component": "carts", "user_id": 7})

    def test_messages_carry_context(self):
        log = get_logger("apps.tests.logger").bind(component="catalog")
        with self.assertLogs("apps.tests.logger", level="INFO") as captured:
            log.info("Stock reserved", product_ids=[1, 2], attempt=1)
        self.assertIn(
            "Stock reserved | component=catalog product_ids=[1, 2] attempt=1",
            captured.output[0],
        )

    def test_critical_includes_traceback(self):
        log = get_logger("apps.tests.logger")
        with self.assertLogs("apps.tests.logger", level="CRITICAL") as captured:
            try:
                raise RuntimeError("cart clear failed")
            except RuntimeError:
                log.critical("Needs reconciliation", exc_info=True, user_id=3)
        self.assertEqual(captured.records[0].levelname, "CRITICAL")
        self.assertIsNotNone(captured.records[0].exc_info)

    def test_format_without_context(self):
        self.assertEqual(AppLogger._format("plain", {}), "plain")

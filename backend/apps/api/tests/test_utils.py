import unittest
from rest_framework import status
from apps.api.exceptions import ApplicationError
from apps.api.utils import error_response


class ErrorResponseTests(unittest.TestCase):
    def test_default_status_mapping_and_details(self):
        resp = error_response("NOT_FOUND", "missing", {"productId": 1})
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["code"], "NOT_FOUND")
        self.assertEqual(resp.data["error"]["status"], status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data["error"]["details"], {"productId": 1})

    def test_checkout_codes_have_dedicated_statuses(self):
        self.assertEqual(
            error_response("EMPTY_CART", "Cart is empty").status_code,
            status.HTTP_400_BAD_REQUEST,
        )
        self.assertEqual(
            error_response("insufficient_stock", "short").status_code,
            status.HTTP_409_CONFLICT,
        )
        self.assertEqual(
            error_response("INCONSISTENT_STATE", "charged").status_code,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    def test_list_details_pass_through(self):
        details = [{"productId": 2, "shortBy": 1}]
        resp = error_response("INSUFFICIENT_STOCK", "short", details)
        self.assertEqual(resp.data["error"]["details"], details)

    def test_custom_status_override(self):
        resp = error_response("UNKNOWN", "oops", http_status=status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.status_code, status.HTTP_202_ACCEPTED)
        self.assertEqual(resp.data["error"]["message"], "oops")

    def test_error_response_supports_hint_and_headers(self):
        resp = error_response(
            "UNAUTHORIZED",
            "Authentication required",
            hint="Send a bearer token",
            headers={"WWW-Authenticate": 'Bearer realm="api"'},
        )
        payload = resp.data["error"]
        self.assertEqual(payload["hint"], "Send a bearer token")
        self.assertNotIn("extra", payload)
        self.assertEqual(resp["WWW-Authenticate"], 'Bearer realm="api"')

    def test_application_error_carries_only_envelope_fields(self):
        exc = ApplicationError("CONFLICT", "Stock changed", details={"productIds": [1]})
        payload = exc.to_response().data["error"]
        self.assertEqual(set(payload), {"code", "message", "status", "details"})
        self.assertFalse(hasattr(exc, "extra"))

    def test_blank_message_rejected(self):
        with self.assertRaises(ValueError):
            error_response("NOT_FOUND", "   ")

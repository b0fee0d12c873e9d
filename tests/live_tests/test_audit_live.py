import os
import unittest

LIVE_REQUIRED = ["BACKEND_BASE_URL"]


def _has_live_env() -> bool:
    return all(os.getenv(k) for k in LIVE_REQUIRED)


@unittest.skipUnless(_has_live_env(), "LIVE env vars not set (BACKEND_BASE_URL)")
class TestAuditLive(unittest.TestCase):
    def test_health(self):
        from tests.live_tests._live_helpers import health

        self.assertEqual(health(), {"ok": True})

    def test_audit_persist_and_read_back(self):
        """
        LIVE test against a running backend:
        - audit a known invoice (figures are fixed by the rule set)
        - read the stored report back by invoice number
        - dashboard contract (keys + types only; other audits may exist)
        """
        from tests.live_tests._live_helpers import audit_extracted, dashboard_summary, stored_report, unique_suffix

        invoice_no = f"LIVE-{unique_suffix()}"
        report = audit_extracted(
            {
                "invoice_number": invoice_no,
                "invoice_total": 10000,
                "line_items": [
                    {
                        "description": "Synthetic Sports Shoe",
                        "hs_code": "6404.11.00",
                        "quantity": 1000,
                        "unit_price": 10,
                        "total_price": 10000,
                    }
                ],
                "rex_statement_present": True,
            }
        )

        self.assertEqual(report["financial_summary"]["total_assessable_value"], 10201.0)
        self.assertEqual(report["financial_summary"]["total_revenue_risk"], 1213.92)
        self.assertIn(invoice_no, report["sync_status"])

        stored = stored_report(invoice_no)
        self.assertEqual(stored["financial_summary"]["total_assessable_value"], 10201.0)

        summary = dashboard_summary()
        self.assertIsInstance(summary["total_shipments"], int)
        self.assertIsInstance(summary["status_counts"], dict)
        self.assertIsInstance(summary["margin_counts"], dict)


if __name__ == "__main__":
    unittest.main()

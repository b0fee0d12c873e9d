import unittest

from tests.integration_db._db_case import DbTestCase


class TestShipmentsAPI(DbTestCase):
    def test_list_shipments_with_audit(self):
        self.audit()

        r = self.client.get("/shipments?limit=50")
        self.assertEqual(r.status_code, 200)

        rows = r.json()["data"]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["invoice_no"], "INV-2026-001")
        self.assertEqual(rows[0]["audit"]["assessable_value"], 10201.0)
        self.assertEqual(rows[0]["audit"]["risk_score"], 7)
        self.assertEqual(rows[0]["lead_time_days"], 25)

    def test_stored_report_matches_returned_report(self):
        returned = self.audit().json()["data"]

        r = self.client.get("/shipments/INV-2026-001/report")
        self.assertEqual(r.status_code, 200)
        stored = r.json()["data"]

        self.assertEqual(stored["financial_summary"], returned["financial_summary"])
        self.assertEqual(stored["line_items"], returned["line_items"])

    def test_report_not_found(self):
        r = self.client.get("/shipments/NOPE/report")
        self.assertEqual(r.status_code, 404)
        self.assertIsNone(r.json()["data"])
        self.assertIn("NOPE", r.json()["error"])

    def test_list_empty(self):
        r = self.client.get("/shipments")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"], [])

    def test_list_validation_limit_zero(self):
        r = self.client.get("/shipments?limit=0")
        self.assertEqual(r.status_code, 422)


if __name__ == "__main__":
    unittest.main()

import unittest

from tests.integration_db._db_case import DbTestCase
from app import app


class TestRatesAPI(DbTestCase):
    def test_get_default_when_missing(self):
        r = self.client.get("/rates/General")
        self.assertEqual(r.status_code, 200)
        data = r.json()["data"]
        self.assertEqual(data["incentive_rate"], 0.08)
        self.assertEqual(data["source"], "default")

    def test_put_percentage_stored_as_fraction(self):
        r = self.client.put("/rates/General", json={"incentive_rate": 8})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["data"]["incentive_rate"], 0.08)

        data = self.client.get("/rates/General").json()["data"]
        self.assertEqual(data["incentive_rate"], 0.08)
        self.assertEqual(data["source"], "db")

    def test_put_updates_existing_row(self):
        self.client.put("/rates/Textile", json={"incentive_rate": 0.05})
        self.client.put("/rates/Textile", json={"incentive_rate": 0.04})
        self.assertEqual(self.client.get("/rates/Textile").json()["data"]["incentive_rate"], 0.04)

    def test_put_negative_rejected(self):
        r = self.client.put("/rates/General", json={"incentive_rate": -1})
        self.assertEqual(r.status_code, 400)
        self.assertIn("between 0 and 100", r.json()["error"])

    def test_put_missing_body(self):
        r = self.client.put("/rates/General", json={})
        self.assertEqual(r.status_code, 422)

    def test_put_clears_summary_cache(self):
        app.state.ttl_cache = {"summary:limit=500": (9e12, {"dummy": 1})}
        self.client.put("/rates/General", json={"incentive_rate": 0.09})
        self.assertFalse(any(k.startswith("summary:") for k in app.state.ttl_cache.keys()))


if __name__ == "__main__":
    unittest.main()

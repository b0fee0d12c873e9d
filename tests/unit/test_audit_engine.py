import unittest

from schemas.audit import AdvisorContext, AuditContext, LineItem, LogisticsSignals
from services.audit_engine import audit_line_item, line_items_from_extraction, run_audit
from services.math_validator import validate_items

FIXED_TS = "2026-01-01T00:00:00+00:00"


def _shoe(**kw) -> LineItem:
    base = dict(
        description="Synthetic Sports Shoe",
        hs_code="6405.90.00",
        quantity=1000,
        unit_price=10,
        declared_total=10000,
    )
    base.update(kw)
    return LineItem(**base)


class TestReferenceInvoice(unittest.TestCase):
    def setUp(self):
        self.report = run_audit(
            [_shoe()],
            10000,
            AuditContext(incentive_rate=0.08),
            metadata={"invoice_number": "INV-001", "origin": "Dhaka, Bangladesh"},
            generated_at=FIXED_TS,
        )

    def test_financial_summary(self):
        fs = self.report.financial_summary
        self.assertEqual(fs.true_total_fob, 10000.00)
        self.assertEqual(fs.total_assessable_value, 10201.00)
        self.assertEqual(fs.total_revenue_risk, 1213.92)
        self.assertEqual(fs.total_incentives, 800.00)
        self.assertEqual(fs.duty_drawback, 600.00)
        self.assertEqual(fs.total_benefit, 1400.00)
        self.assertEqual(fs.net_margin_percent, 2.10)
        self.assertEqual(fs.margin_status, "HEDGED")
        self.assertEqual(fs.current_tti_rate, 58.60)
        self.assertEqual(fs.future_tti_rate, 70.50)
        self.assertEqual(fs.ldc_graduation_risk_score, 7)

    def test_hs_correction_surfaces_on_item(self):
        item = self.report.line_items[0]
        self.assertFalse(item.compliance.valid)
        self.assertEqual(item.compliance.hs_code_used, "6404.11.00")
        self.assertIn("6404.11.00", item.compliance.correction_suggestion)
        self.assertEqual(item.financial.duty_rate, 58.60)

    def test_compliance_summary(self):
        cs = self.report.compliance_summary
        self.assertTrue(cs.sum_check_passed)
        self.assertTrue(cs.rex_required)
        self.assertEqual(cs.rex_status, "MISSING")
        self.assertEqual(cs.risk_level, "High")
        self.assertFalse(cs.extraction_incomplete)

    def test_recommendations(self):
        types = [r.type for r in self.report.recommendations]
        self.assertEqual(types[:4], ["Logistics", "Incentive", "Drawback", "Strategic"])
        self.assertIn("Compliance", types)
        self.assertNotIn("Math Integrity", types)

    def test_metadata(self):
        md = self.report.metadata
        self.assertEqual(md.invoice_number, "INV-001")
        self.assertEqual(md.origin, "Dhaka, Bangladesh")
        self.assertEqual(md.generated_at, FIXED_TS)
        self.assertIsNone(self.report.sync_status)

    def test_sustainability(self):
        self.assertEqual(self.report.sustainability.overall_score, "High")
        self.assertTrue(self.report.sustainability.cbam_applicable)
        self.assertEqual(self.report.sustainability.cbam_liability_eur, 500.00)


class TestEngineEdges(unittest.TestCase):
    def test_sum_rule_on_full_report(self):
        items = [
            LineItem(description="Running shoe", hs_code="6404.11.00", quantity=1, unit_price=1450.33, declared_total=1450.33),
            LineItem(description="Running shoe", hs_code="6404.11.00", quantity=1, unit_price=2890.77, declared_total=2890.77),
            LineItem(description="Running shoe", hs_code="6404.11.00", quantity=1, unit_price=540.11, declared_total=540.11),
        ]
        report = run_audit(items, 4881.21, AuditContext())
        self.assertEqual(report.financial_summary.true_total_fob, 4881.21)
        self.assertEqual(report.financial_summary.total_assessable_value, 4979.32)
        self.assertEqual(report.financial_summary.total_revenue_risk, 592.54)

    def test_unknown_tariff_omits_financials_but_counts_toward_total(self):
        items = [
            _shoe(hs_code="6404.11.00", description="Running shoe", quantity=10, unit_price=100, declared_total=1000),
            LineItem(description="Mystery", hs_code="9999.99", quantity=1, unit_price=500, declared_total=500),
        ]
        report = run_audit(items, 1500, AuditContext())

        unknown = report.line_items[1]
        self.assertIsNone(unknown.financial)
        self.assertFalse(unknown.compliance.valid)
        self.assertEqual(report.compliance_summary.invalid_items, 1)
        self.assertEqual(report.financial_summary.true_total_fob, 1500.00)

    def test_line_math_correction_drives_totals(self):
        report = run_audit([_shoe(declared_total=13000)], 13000, AuditContext(rex_present=True))

        self.assertTrue(report.line_items[0].math_flag)
        self.assertEqual(report.financial_summary.true_total_fob, 10000.00)
        self.assertFalse(report.compliance_summary.sum_check_passed)
        self.assertIn("Math Integrity", [r.type for r in report.recommendations])

    def test_extraction_gap_still_produces_report(self):
        report = run_audit([], 0, AuditContext(), extraction_error="extraction failed: timeout")

        self.assertTrue(report.metadata.extraction_incomplete)
        self.assertEqual(report.metadata.extraction_error, "extraction failed: timeout")
        self.assertTrue(report.compliance_summary.sum_check_passed)
        self.assertEqual(report.financial_summary.total_assessable_value, 0.0)
        self.assertEqual(report.line_items, [])

    def test_road_delay_puts_margin_at_risk(self):
        ctx = AuditContext(signals=LogisticsSignals(road="Congested", road_delay_hours=8))
        report = run_audit([_shoe()], 10000, ctx)
        self.assertEqual(report.financial_summary.net_margin_percent, 0.10)
        self.assertEqual(report.financial_summary.margin_status, "AT RISK")
        self.assertEqual(report.shipment_health.overall_score, 80)

    def test_missing_code_without_estimate(self):
        validated, _ = validate_items([LineItem(description="Widget", hs_code="Pending", quantity=1, unit_price=1, declared_total=1)])
        audited = audit_line_item(validated[0])
        self.assertFalse(audited.compliance.valid)
        self.assertIsNone(audited.financial)
        self.assertTrue(audited.compliance.is_estimated)

    def test_negative_weight_never_yields_negative_cbam(self):
        item = LineItem(description="Steel bolts", hs_code="6404.11.00", quantity=10, unit_price=100, declared_total=1000, net_weight_kg=-2000)
        report = run_audit([item], 1000, AuditContext())

        cbam = report.line_items[0].financial.cbam_liability
        self.assertEqual(report.line_items[0].net_weight_kg, 0.0)
        # no usable weight -> chapter 64 value fallback (5% of 1000)
        self.assertEqual(cbam.liability_eur, 50.0)
        self.assertEqual(report.financial_summary.cbam_liability_eur, 50.0)

    def test_nan_weight_keeps_cbam_totals_finite(self):
        item = LineItem(description="Steel bolts", hs_code="6404.11.00", quantity=10, unit_price=100, declared_total=1000, net_weight_kg=float("nan"))
        report = run_audit([item], 1000, AuditContext())

        self.assertEqual(report.financial_summary.cbam_liability_eur, 50.0)
        self.assertEqual(report.sustainability.cbam_liability_eur, 50.0)

    def test_accepts_advisor_context(self):
        ctx = AdvisorContext(incentive_rate=0.08, product_description="stale", cbam_liability_eur=999.0)
        report = run_audit([_shoe()], 10000, ctx)

        self.assertEqual(report.financial_summary.total_assessable_value, 10201.00)
        # per-item facts are recomputed, not carried over from the caller
        self.assertEqual(report.sustainability.cbam_liability_eur, 500.00)


class TestLineItemsFromExtraction(unittest.TestCase):
    def test_maps_and_cleans(self):
        items = line_items_from_extraction(
            [
                {"description": " Shoe ", "hs_code": "6404.11.00", "quantity": "100", "unit_price": "10", "total_price": "1,000"},
                "not a dict",
                {"description": None, "quantity": -3},
            ]
        )
        self.assertEqual(len(items), 2)
        self.assertEqual(items[0].description, "Shoe")
        self.assertEqual(items[0].declared_total, 1000.0)
        self.assertEqual(items[1].description, "")
        self.assertEqual(items[1].quantity, 0.0)

    def test_none(self):
        self.assertEqual(line_items_from_extraction(None), [])


if __name__ == "__main__":
    unittest.main()

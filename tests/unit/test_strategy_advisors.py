import unittest

from schemas.audit import AdvisorContext, LogisticsSignals
from services.aggregator import aggregate_invoice
from services.strategies import (
    NET_MARGIN_PERCENT,
    advise_incentive,
    advise_math_integrity,
    advise_rex,
    logistics_advice,
    net_margin_percent,
    normalize_rate,
    resolve_incentive,
    run_advisors,
    shipment_health_score,
)


def _ctx(**kw) -> AdvisorContext:
    return AdvisorContext(**kw)


class TestMargin(unittest.TestCase):
    def test_net_margin_constant(self):
        self.assertEqual(NET_MARGIN_PERCENT, 2.10)
        self.assertEqual(net_margin_percent(_ctx()), 2.10)

    def test_road_delay_penalty(self):
        ctx = _ctx(signals=LogisticsSignals(road="Congested", road_delay_hours=7.5))
        self.assertAlmostEqual(net_margin_percent(ctx), 0.10)

    def test_delay_at_threshold_no_penalty(self):
        ctx = _ctx(signals=LogisticsSignals(road="Congested", road_delay_hours=6.0))
        self.assertEqual(net_margin_percent(ctx), 2.10)


class TestIncentive(unittest.TestCase):
    def test_rate_normalization(self):
        self.assertEqual(normalize_rate(8), 0.08)
        self.assertEqual(normalize_rate(0.08), 0.08)
        self.assertEqual(normalize_rate(None), 0.0)

    def test_configured_rate(self):
        agg = aggregate_invoice([], 10000)
        rate, amount, _ = resolve_incentive(agg, _ctx(incentive_rate=0.08))
        self.assertEqual(rate, 0.08)
        self.assertAlmostEqual(amount, 800.0)

    def test_zero_rate_falls_back_to_program(self):
        agg = aggregate_invoice([], 10000)
        rate, _, program = resolve_incentive(agg, _ctx(incentive_rate=0, product_description="Jute bags"))
        self.assertEqual(rate, 0.10)
        self.assertEqual(program, "Agro-Product Incentive")

    def test_no_incentive_no_advice(self):
        agg = aggregate_invoice([], 10000)
        self.assertIsNone(advise_incentive(agg, _ctx(incentive_rate=0, product_description="Widgets")))


class TestFlags(unittest.TestCase):
    def test_rex_missing_flag(self):
        agg = aggregate_invoice([], 10000)
        out = advise_rex(agg, _ctx())
        self.assertEqual(out.type, "Compliance")
        self.assertIn("$10,000.00", out.advice)

    def test_rex_present_no_flag(self):
        agg = aggregate_invoice([], 10000, rex_present=True)
        self.assertIsNone(advise_rex(agg, _ctx()))

    def test_math_integrity_flag(self):
        agg = aggregate_invoice([], 100, line_math_error=True)
        self.assertEqual(advise_math_integrity(agg, _ctx()).type, "Math Integrity")


class TestLogistics(unittest.TestCase):
    def test_sea_when_clear(self):
        agg = aggregate_invoice([], 1000)
        adv = logistics_advice(agg, _ctx())
        self.assertEqual(adv.recommended, "Sea")
        self.assertAlmostEqual(adv.savings, 450.0)

    def test_air_when_port_congested(self):
        agg = aggregate_invoice([], 1000)
        adv = logistics_advice(agg, _ctx(signals=LogisticsSignals(sea="At Anchor")))
        self.assertEqual(adv.recommended, "Air")
        self.assertEqual(adv.savings, 0.0)
        self.assertIn("DEMURRAGE", adv.message)

    def test_lead_time_follows_mode(self):
        agg = aggregate_invoice([], 1000)
        self.assertEqual(logistics_advice(agg, _ctx()).lead_time_days, 25)
        self.assertEqual(logistics_advice(agg, _ctx(signals=LogisticsSignals(sea="At Anchor"))).lead_time_days, 3)
        self.assertEqual(logistics_advice(agg, _ctx(signals=LogisticsSignals(weather="Storm"))).lead_time_days, 3)

    def test_health_score(self):
        self.assertEqual(shipment_health_score(LogisticsSignals()), 100)
        bad = LogisticsSignals(road="Congested", sea="At Anchor", weather="Storm")
        self.assertEqual(shipment_health_score(bad), 30)


class TestRunAdvisors(unittest.TestCase):
    def test_order_and_non_negative_savings(self):
        agg = aggregate_invoice([], 10000)
        ctx = _ctx(
            erp_recommendation="Standard import procedure is acceptable.",
            signals=LogisticsSignals(weather="Storm"),
        )
        recs = run_advisors(agg, ctx)
        types = [r.type for r in recs]

        self.assertEqual(types, ["Logistics", "Incentive", "Drawback", "Strategic", "Compliance", "Logistics"])
        self.assertTrue(all(r.savings >= 0 for r in recs))


if __name__ == "__main__":
    unittest.main()

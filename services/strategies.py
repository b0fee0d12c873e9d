"""
Strategy advisors.

Each advisor is a pure function (aggregate, context) -> StrategyOutput | None.
They read the single InvoiceAggregate and never recompute totals.
Savings are emitted in full precision; the report assembler rounds them.
"""
from typing import Callable, Optional

from schemas.audit import (
    AdvisorContext,
    InvoiceAggregate,
    LogisticsAdvice,
    LogisticsSignals,
    StrategyOutput,
)
from services.calculations import LDC_RISK_RATE_PERCENT
from services.money import format_usd, round2


AIR_COST_FACTOR = 5.0
SEA_COST_FACTOR = 0.5

DRAWBACK_RATE = 0.06
DEFAULT_INCENTIVE_RATE = 0.08

# 14% total benefit (8% incentive + 6% drawback) - 11.9% fixed risk
BENEFIT_PERCENT = (DEFAULT_INCENTIVE_RATE + DRAWBACK_RATE) * 100
NET_MARGIN_PERCENT = round2(BENEFIT_PERCENT - LDC_RISK_RATE_PERCENT)  # +2.10
EFFICIENCY_PENALTY_PERCENT = 2.0

SEA_CONGESTED = ("At Anchor", "Delayed")

# Door-to-port transit estimate per mode
LEAD_TIME_DAYS = {"Air": 3, "Sea": 25}

# Fallback when no positive configured rate: Export Policy 2024-27 programs
INCENTIVE_PROGRAMS = (
    (("synthetic", "footwear", "textile"), 0.08, "Synthetic/Fabric Footwear Incentive"),
    (("agro", "jute"), 0.10, "Agro-Product Incentive"),
    (("leather",), 0.10, "Leather Sector Support"),
)


Advisor = Callable[[InvoiceAggregate, AdvisorContext], Optional[StrategyOutput]]


# -------------------------
# Rates / margins
# -------------------------

def normalize_rate(rate: float) -> float:
    """Values > 1 are already percentages (8 -> 0.08)."""
    rate = float(rate or 0.0)
    return rate / 100 if rate > 1 else rate


def match_incentive_program(description: str) -> tuple[float, str]:
    desc = (description or "").lower()
    for keywords, rate, program in INCENTIVE_PROGRAMS:
        if any(k in desc for k in keywords):
            return rate, program
    return 0.0, "N/A"


def resolve_incentive(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> tuple[float, float, str]:
    """-> (rate, full-precision amount, program name)."""
    rate = normalize_rate(ctx.incentive_rate)
    program = "Configured Export Incentive"
    if rate <= 0:
        rate, program = match_incentive_program(ctx.product_description)
    return rate, aggregate.true_total_fob * rate, program


def drawback_amount(aggregate: InvoiceAggregate) -> float:
    return aggregate.true_total_fob * DRAWBACK_RATE


def road_delay_critical(ctx: AdvisorContext) -> bool:
    hours = ctx.signals.road_delay_hours
    return hours is not None and hours > ctx.road_delay_critical_hours


def efficiency_penalty(ctx: AdvisorContext) -> float:
    return EFFICIENCY_PENALTY_PERCENT if road_delay_critical(ctx) else 0.0


def net_margin_percent(ctx: AdvisorContext) -> float:
    return NET_MARGIN_PERCENT - efficiency_penalty(ctx)


def shipment_health_score(signals: LogisticsSignals) -> int:
    score = 100
    if signals.road == "Congested":
        score -= 20
    if signals.sea in SEA_CONGESTED:
        score -= 20
    if signals.weather == "Storm":
        score -= 30
    return max(0, score)


# -------------------------
# Logistics mode
# -------------------------

def freight_estimate(value: float, mode: str) -> float:
    weight_est = value / 10
    return weight_est * (AIR_COST_FACTOR if mode == "Air" else SEA_COST_FACTOR)


def logistics_advice(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> LogisticsAdvice:
    signals = ctx.signals
    air_cost = freight_estimate(aggregate.true_total_fob, "Air")
    sea_cost = freight_estimate(aggregate.true_total_fob, "Sea")

    sea_congested = signals.sea in SEA_CONGESTED
    weather_bad = signals.weather == "Storm"

    if not sea_congested and not weather_bad:
        savings = max(0.0, air_cost - sea_cost)
        return LogisticsAdvice(
            recommended="Sea",
            air_cost=air_cost,
            sea_cost=sea_cost,
            savings=savings,
            lead_time_days=LEAD_TIME_DAYS["Sea"],
            message=(
                f"Port status is {signals.sea} & Weather is {signals.weather}. "
                f"Switch to Sea Freight to save {format_usd(savings)}."
            ),
        )

    if sea_congested and not weather_bad:
        message = (
            f"Vessel is {signals.sea}. POTENTIAL DEMURRAGE WARNING: vessel waiting > 24h. "
            "Recommend a 24-48h truck dispatch delay; Air freight recommended for urgent cargo."
        )
    else:
        message = f"High Risk Detected (Port: {signals.sea}, Weather: {signals.weather}). Air freight recommended."

    return LogisticsAdvice(
        recommended="Air",
        air_cost=air_cost,
        sea_cost=sea_cost,
        savings=0.0,
        lead_time_days=LEAD_TIME_DAYS["Air"],
        message=message,
    )


def advise_logistics(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    advice = logistics_advice(aggregate, ctx)
    if advice.recommended == "Sea" and advice.savings <= 0:
        return None
    return StrategyOutput(type="Logistics", advice=advice.message, savings=advice.savings)


# -------------------------
# Money advisors
# -------------------------

def advise_incentive(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    rate, amount, program = resolve_incentive(aggregate, ctx)
    if rate <= 0 or amount <= 0:
        return None
    return StrategyOutput(
        type="Incentive",
        advice=f"Claim Cash Incentive ({rate * 100:.2f}% of FOB) under {program}",
        savings=amount,
    )


def advise_drawback(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    amount = drawback_amount(aggregate)
    if amount <= 0:
        return None
    return StrategyOutput(
        type="Drawback",
        advice=f"Claim Duty Drawback ({DRAWBACK_RATE * 100:.0f}% of FOB) on imported raw materials",
        savings=amount,
    )


def advise_erp(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if not ctx.erp_recommendation:
        return None
    return StrategyOutput(type="Strategic", advice=ctx.erp_recommendation, savings=0.0)


# -------------------------
# Compliance flags
# -------------------------

def advise_rex(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if aggregate.rex_status != "MISSING":
        return None
    return StrategyOutput(
        type="Compliance",
        advice=(
            f"REX statement missing: invoice FOB {format_usd(aggregate.true_total_fob)} exceeds the "
            "EUR 6,000 self-certification threshold. Add a REX statement on origin before EU clearance."
        ),
        savings=0.0,
    )


def advise_math_integrity(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if not aggregate.math_errors_found:
        return None
    return StrategyOutput(
        type="Math Integrity",
        advice=(
            f"Sum Check Error: declared total {format_usd(aggregate.declared_total)} vs true total "
            f"{format_usd(aggregate.true_total_fob)} (qty x unit price). Corrected values applied."
        ),
        savings=0.0,
    )


def advise_cbam(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if not ctx.cbam_applicable:
        return None
    return StrategyOutput(
        type="Compliance",
        advice=f"Prepare CBAM Carbon Certificate for EU Customs (est. EUR {ctx.cbam_liability_eur:,.2f})",
        savings=0.0,
    )


def advise_road(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if not road_delay_critical(ctx):
        return None
    return StrategyOutput(
        type="Logistics",
        advice=(
            f"Road delay {ctx.signals.road_delay_hours:g}h on the Dhaka-Chattogram corridor exceeds "
            f"{ctx.road_delay_critical_hours:g}h. Dispatch trucks early; net margin reduced by "
            f"{EFFICIENCY_PENALTY_PERCENT:.2f} points."
        ),
        savings=0.0,
    )


def advise_weather(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> Optional[StrategyOutput]:
    if ctx.signals.weather != "Storm":
        return None
    return StrategyOutput(
        type="Logistics",
        advice="Storm warning at Chattogram Port. Add a 24h lead-time buffer and secure cargo insurance.",
        savings=0.0,
    )


# Assembly order of the recommendations list
ADVISORS: tuple[Advisor, ...] = (
    advise_logistics,
    advise_incentive,
    advise_drawback,
    advise_erp,
    advise_rex,
    advise_math_integrity,
    advise_cbam,
    advise_road,
    advise_weather,
)


def run_advisors(aggregate: InvoiceAggregate, ctx: AdvisorContext) -> list[StrategyOutput]:
    out: list[StrategyOutput] = []
    for advisor in ADVISORS:
        res = advisor(aggregate, ctx)
        if res is not None:
            out.append(res)
    return out

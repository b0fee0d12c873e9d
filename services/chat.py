from typing import Any, Dict, List

from openai import OpenAI

from core.config import settings
from core.logger import log
from models.audit_log import AuditLog
from services.money import format_usd


SYSTEM_PROMPT = """
# IDENTITY
You are the "Logistics Command Center" assistant: a CA and logistics auditor for Bangladesh's export sector.

# RULES
- Do not use markdown bold. Keep bullet points short.
- Never recompute figures differently from the audit data below.

# MATHEMATICAL INTEGRITY (GROUND TRUTH)
- AV Calculation: (FOB * 1.01) * 1.01.
- Cash Incentive: configured rate on FOB (default 8.00%).
- 2026 Risk: 11.9% of AV.
- Net margin: 14% benefit (8% incentive + 6% drawback) - 11.9% = +2.10%.

# KNOWLEDGE BASE
{knowledge}

# LIVE AUDIT DATA (latest first)
{audits}
"""

KNOWLEDGE_BASE: Dict[str, Any] = {
    "highway_corridors": {
        "Dhaka_Chattogram_N1": {
            "chokepoints": ["Meghna Bridge", "Daudkandi", "Sitakunda"],
            "historical_delay": "3-6 hours",
        },
    },
    "port_dwell_times": {
        "Chattogram_Port": {"vessel_berthing_delay": "3-5 days (if congestion > 70%)", "icd_clearance": "24-48 hours"},
        "Mongla_Port": {"advantage": "Lower congestion vs CTG"},
    },
    "seasonal_buffers": {
        "Monsoon_Jun_Aug": "Add 15% lead-time buffer",
        "Winter_Dec_Jan": "Add 10% lead-time buffer",
        "Ramadan_Eid": "Add 25% lead-time buffer",
    },
}


def audit_digest(logs: List[AuditLog]) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for row in logs:
        out.append(
            {
                "invoice_no": row.shipment.invoice_no if row.shipment else None,
                "fob_value": row.shipment.fob_value if row.shipment else None,
                "assessable_value": row.assessable_value,
                "incentive_amount": row.incentive_amount,
                "ldc_risk_value": row.ldc_risk_value,
                "risk_score": row.risk_score,
                "net_margin": row.net_margin,
            }
        )
    return out


def offline_reply(digest: List[Dict[str, Any]]) -> str:
    """Deterministic answer built from stored figures only."""
    if not digest:
        return "No audits stored yet. Upload an invoice to start."

    latest = digest[0]
    return "\n".join(
        [
            f"Invoice: {latest['invoice_no']}",
            f"AV Audit: {format_usd(latest['assessable_value'])} (FOB x 1.01 x 1.01)",
            f"Benefit: +{format_usd(latest['incentive_amount'])} cash incentive",
            f"2026 Risk: -{format_usd(latest['ldc_risk_value'])} (11.9% of AV)",
            f"Net Margin: {latest['net_margin']:.2f}%",
        ]
    )


class ChatAssistant:
    """
    Natural-language Q&A over stored audits.
    Falls back to a deterministic summary when AI is off or fails.
    """

    def __init__(self) -> None:
        if not settings.AI_ENABLED or settings.AI_PROVIDER != "openai":
            self.enabled = False
            self.client = None
            return

        self.enabled = True
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL or None)
        self.model = settings.OPENAI_MODEL

    def reply(self, *, messages: List[Dict[str, str]], logs: List[AuditLog]) -> Dict[str, Any]:
        digest = audit_digest(logs)

        if not self.enabled:
            return {"reply": offline_reply(digest), "source": "offline"}

        try:
            system = SYSTEM_PROMPT.format(knowledge=KNOWLEDGE_BASE, audits=digest)
            resp = self.client.chat.completions.create(
                model=self.model,
                temperature=0.2,
                messages=[{"role": "system", "content": system}, *messages],
                timeout=30,
            )
            return {"reply": resp.choices[0].message.content or "", "source": "ai"}

        except Exception as e:
            log.warning("chat completion failed: %s", e)
            return {"reply": offline_reply(digest), "source": "offline"}

import base64
import json
import re
from typing import Any, Dict

from openai import OpenAI

from core.config import settings
from core.logger import log


_REX_PATTERN = re.compile(r"\bREX\b|statement on origin", re.IGNORECASE)
_FENCE = re.compile(r"```(?:json)?")

EXTRACTION_PROMPT = """
You are the 'Document Verifier' agent acting as a Universal Document Parser.
Analyze the provided document image (Commercial Invoice / Bill of Entry).

1. Flexible Extraction:
   - invoice_number: string labeled 'Invoice', 'Ref', or 'Document No'.
   - invoice_date: string.
   - origin: 'City, Country' from the Exporter/Shipper address.
   - destination: 'City, Country' from the Consignee/Buyer address.
   - buyer_details: Name and Address of the Buyer/Consignee.
   - invoice_total: final value labeled 'Total', 'FOB', 'Grand Total' or 'Net Payable'.
   - rex_statement_present: true if a REX / statement on origin is printed.
   - document_text: any origin-declaration text found, verbatim.

2. Line-Item Extraction (line_items array):
   - description (string)
   - hs_code (string): if missing/illegible set to "Pending".
   - estimated_hs_code (string): if missing, the most likely 6-digit code from the description.
   - quantity (number), unit_price (number), total_price (number)
   - net_weight (number, kg) when printed.

Return ONLY JSON. Ensure 'line_items' is a valid array.
"""


def empty_extraction(error: str | None = None) -> Dict[str, Any]:
    return {
        "invoice_number": None,
        "invoice_date": None,
        "origin": None,
        "destination": None,
        "buyer_details": None,
        "invoice_total": 0,
        "line_items": [],
        "rex_statement_present": False,
        "document_text": None,
        "error": error,
    }


def detect_rex_statement(extraction: Dict[str, Any]) -> bool:
    if extraction.get("rex_statement_present") is True:
        return True
    text = extraction.get("document_text") or ""
    return bool(_REX_PATTERN.search(str(text)))


class DocumentExtractor:
    """
    Multimodal invoice extraction (OpenAI-compatible chat completions).
    Never raises: any failure yields an empty extraction carrying `error`,
    so the engine still produces a report flagged "extraction incomplete".
    """

    def __init__(self) -> None:
        if not settings.AI_ENABLED or settings.AI_PROVIDER != "openai":
            self.enabled = False
            self.client = None
            return

        self.enabled = True
        self.client = OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL or None)
        self.model = settings.OPENAI_MODEL

    def extract(self, *, content: bytes, mime_type: str) -> Dict[str, Any]:
        if not self.enabled:
            return empty_extraction("AI extraction disabled")

        try:
            data_url = f"data:{mime_type};base64,{base64.b64encode(content).decode('ascii')}"

            resp = self.client.chat.completions.create(
                model=self.model,
                temperature=0.0,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": EXTRACTION_PROMPT},
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": "Analyze this document."},
                            {"type": "image_url", "image_url": {"url": data_url}},
                        ],
                    },
                ],
                timeout=60,
            )

            raw = resp.choices[0].message.content or "{}"
            data = self._safe_parse_json(raw)

            out = empty_extraction()
            out.update({k: v for k, v in data.items() if k in out})
            if not isinstance(out["line_items"], list):
                out["line_items"] = []
            out["invoice_total"] = data.get("invoice_total", data.get("total_invoice_value", 0))
            return out

        except Exception as e:
            log.warning("document extraction failed: %s", e)
            return empty_extraction(f"extraction failed: {e}")

    # -------------------------
    # Helpers
    # -------------------------

    def _safe_parse_json(self, raw: str) -> Dict[str, Any]:
        raw = _FENCE.sub("", raw).strip()
        data = json.loads(raw)
        return data if isinstance(data, dict) else {}

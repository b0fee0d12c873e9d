import os
from typing import Any, Dict, Optional

import requests

DEFAULT_TIMEOUT = float(os.getenv("LIVE_HTTP_TIMEOUT", "30"))


def _require_env(name: str) -> str:
    val = os.getenv(name)
    if not val:
        raise RuntimeError(f"Missing required env var: {name}")
    return val


def backend_base_url() -> str:
    # A running instance of this service (uvicorn app:app)
    return _require_env("BACKEND_BASE_URL").rstrip("/")


def _get(url: str, *, headers: Optional[Dict[str, str]] = None, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    r = requests.get(url, headers=headers, timeout=timeout)
    r.raise_for_status()
    return r.json()


def _post(url: str, *, json_body: Dict[str, Any], timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    r = requests.post(url, json=json_body, timeout=timeout)

    if r.status_code >= 400:
        try:
            payload = r.json()
        except ValueError:
            payload = {"raw": r.text}

        raise RuntimeError(
            f"Backend POST failed\n"
            f"URL: {url}\n"
            f"HTTP: {r.status_code}\n"
            f"Response: {payload}\n"
        )

    return r.json()


def health() -> Dict[str, Any]:
    return _get(f"{backend_base_url()}/health")


def audit_extracted(payload: Dict[str, Any]) -> Dict[str, Any]:
    return _post(f"{backend_base_url()}/audit/extracted", json_body=payload).get("data", {})


def stored_report(invoice_no: str) -> Dict[str, Any]:
    return _get(f"{backend_base_url()}/shipments/{invoice_no}/report").get("data", {})


def dashboard_summary() -> Dict[str, Any]:
    return _get(f"{backend_base_url()}/dashboard/summary", headers={"Cache-Control": "no-cache"}).get("data", {})


def unique_suffix(n: int = 6) -> str:
    import random, string
    return "".join(random.choice(string.ascii_lowercase + string.digits) for _ in range(n))

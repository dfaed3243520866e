"""
Container health check for the analysis API.

Exits 0 when /health answers 2xx with ``status == "ok"``; 1 otherwise.
Set HEALTHCHECK_REQUIRE_LLM=true to also require a configured LLM credential.
"""

from __future__ import annotations

import os

import requests


def main() -> int:
    port = os.getenv("PORT", "8000")
    path = os.getenv("HEALTHCHECK_PATH", "/health")
    require_llm = os.getenv("HEALTHCHECK_REQUIRE_LLM", "false").strip().lower() in {
        "1",
        "true",
        "yes",
        "on",
    }
    url = f"http://127.0.0.1:{port}{path}"

    try:
        response = requests.get(url, timeout=2)
        response.raise_for_status()
        payload = response.json()
    except (requests.RequestException, ValueError):
        return 1

    if not isinstance(payload, dict) or payload.get("status") != "ok":
        return 1
    if require_llm and not payload.get("llmConfigured"):
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

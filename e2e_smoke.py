from __future__ import annotations

from fastapi.testclient import TestClient

from audit_relay.main import app


def run_smoke() -> None:
    with TestClient(app) as client:
        client.get("/health").raise_for_status()
        resp = client.get("/api/audit-status")
        resp.raise_for_status()
        limits = resp.json().get("limits", {})
    print("Smoke test completed. limits=", limits)


if __name__ == "__main__":
    run_smoke()

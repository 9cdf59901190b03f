"""
Till ledger HTTP smoke check against a running server.

Adds a throwaway item, sells it past its stock, receives a walk-in
order twice and prints each response. Exits non-zero when the clamp or
the receive idempotence does not hold.

    python scripts/smoke_http_api.py [--base-url http://127.0.0.1:8000]
"""

from __future__ import annotations

import argparse
import json
import sys
from urllib import error, request


class LedgerClient:
    def __init__(self, base_url: str) -> None:
        self.api = base_url.rstrip("/") + "/v1/ledger"

    def _send(self, req: request.Request) -> tuple[int, dict]:
        try:
            with request.urlopen(req) as response:
                return response.status, json.load(response)
        except error.HTTPError as exc:
            return exc.code, json.load(exc)

    def get(self, path: str) -> tuple[int, dict]:
        return self._send(request.Request(f"{self.api}/{path}", method="GET"))

    def post(self, path: str, payload: dict) -> tuple[int, dict]:
        return self._send(
            request.Request(
                f"{self.api}/{path}",
                method="POST",
                data=json.dumps(payload).encode("utf-8"),
                headers={"Content-Type": "application/json"},
            )
        )


def _show(step: str, status: int, payload: dict) -> dict:
    print(f"--- {step} ({status})")
    print(json.dumps(payload, indent=2, sort_keys=True))
    return payload


def run(client: LedgerClient) -> list[str]:
    problems: list[str] = []

    _show("dashboard", *client.get("dashboard"))

    item = _show(
        "add item",
        *client.post("items/add", {"name": "Smoke Scarf", "price": 10, "stock": 5}),
    )["item"]

    _show("sell 3", *client.post("sales/record", {"itemId": item["id"], "qty": 3}))
    clamped = _show(
        "sell 10", *client.post("sales/record", {"itemId": item["id"], "qty": 10}),
    )
    if (clamped.get("sale") or {}).get("qty") != 2:
        problems.append("sale beyond stock was not clamped to remaining units")

    order = _show("walk-in order", *client.post("orders/quick", {})).get("order") or {}
    receipts = [
        _show("receive", *client.post("orders/receive", {"orderId": order.get("id", "")}))
        for _ in range(2)
    ]
    if [r.get("applied") for r in receipts] != [True, False]:
        problems.append("receiving an order twice changed state twice")

    status, payload = client.post("sales/record", {"qty": 1})
    _show("missing itemId", status, payload)
    if status != 400:
        problems.append(f"invalid request answered {status}, expected 400")

    _show("dashboard", *client.get("dashboard"))
    return problems


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--base-url", default="http://127.0.0.1:8000")
    args = parser.parse_args()

    problems = run(LedgerClient(args.base_url))
    for problem in problems:
        print(f"FAIL: {problem}", file=sys.stderr)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main())

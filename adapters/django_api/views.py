"""
Till Django Adapter Views
=========================
JSON views over the ledger's UI boundary: state reads plus the five
transaction operations. No presentation.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from adapters.django_api.wiring import get_runtime
from engines.ledger.models import money_to_json
from engines.ledger.snapshot import state_to_snapshot
from engines.ledger.store import LedgerState

logger = logging.getLogger("till.http")


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        {"error": {"code": code, "message": message}},
        status=status,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except ValueError as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _require_str(body: dict[str, Any], field_name: str) -> str:
    value = body.get(field_name)
    if not isinstance(value, str) or not value:
        raise ValueError(f"{field_name} is required.")
    return value


def _require_number(body: dict[str, Any], field_name: str) -> Any:
    value = body.get(field_name)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{field_name} must be a number.")
    return value


def state_payload(state: LedgerState) -> dict[str, Any]:
    payload = state_to_snapshot(state)
    payload["currentDate"] = payload.pop("date")
    payload["sales"] = [sale.to_dict() for sale in state.sales]
    return payload


def _dispatch_write(request: HttpRequest, operation) -> JsonResponse:
    try:
        body = _parse_json_body(request)
        payload, status = operation(body)
    except (ValueError, KeyError) as exc:
        logger.debug(f"Rejected {request.path}: {exc}")
        return _json_error("INVALID_REQUEST", str(exc), status=400)
    return JsonResponse(payload, status=status)


# ── Reads ─────────────────────────────────────────────────────

@require_GET
def ledger_state_view(request: HttpRequest) -> JsonResponse:
    return JsonResponse(state_payload(get_runtime().store.state))


@require_GET
def ledger_dashboard_view(request: HttpRequest) -> JsonResponse:
    return JsonResponse(get_runtime().store.dashboard().to_dict())


# ── Writes ────────────────────────────────────────────────────

@csrf_exempt
@require_POST
def add_item_view(request: HttpRequest) -> JsonResponse:
    def operation(body):
        item = get_runtime().service.add_item(
            _require_str(body, "name"),
            _require_number(body, "price"),
            _require_number(body, "stock"),
        )
        return {"item": item.to_dict()}, 201

    return _dispatch_write(request, operation)


@csrf_exempt
@require_POST
def adjust_stock_view(request: HttpRequest) -> JsonResponse:
    def operation(body):
        item = get_runtime().service.adjust_stock(
            _require_str(body, "itemId"),
            _require_number(body, "delta"),
        )
        return {
            "applied": item is not None,
            "item": item.to_dict() if item is not None else None,
        }, 200

    return _dispatch_write(request, operation)


@csrf_exempt
@require_POST
def record_sale_view(request: HttpRequest) -> JsonResponse:
    def operation(body):
        runtime = get_runtime()
        sale = runtime.service.record_sale(
            _require_str(body, "itemId"),
            _require_number(body, "qty"),
        )
        return {
            "applied": sale is not None,
            "sale": sale.to_dict() if sale is not None else None,
            "dailyIncome": money_to_json(runtime.store.daily_income),
            "dailySold": runtime.store.daily_sold,
        }, 200

    return _dispatch_write(request, operation)


@csrf_exempt
@require_POST
def receive_order_view(request: HttpRequest) -> JsonResponse:
    def operation(body):
        applied = get_runtime().service.receive_order(_require_str(body, "orderId"))
        return {"applied": applied}, 200

    return _dispatch_write(request, operation)


@csrf_exempt
@require_POST
def quick_order_view(request: HttpRequest) -> JsonResponse:
    def operation(body):
        order = get_runtime().service.create_quick_order()
        return {
            "applied": order is not None,
            "order": order.to_dict() if order is not None else None,
        }, (201 if order is not None else 200)

    return _dispatch_write(request, operation)

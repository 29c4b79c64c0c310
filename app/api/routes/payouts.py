"""Payout queue, prize, settlement and period reconciliation routes."""

from aiohttp import web

from app.api.helpers import (
    get_operator,
    get_publisher,
    get_session,
    optional_int,
    optional_str,
    path_id,
    query_limit,
    read_json,
    require_amount,
    require_int,
    require_timestamp,
)
from app.api.serializers import (
    history_to_dict,
    payout_reconciliation_to_dict,
    prize_to_dict,
    queue_entry_to_dict,
    queue_stats_to_dict,
)
from app.config.operational_constants import (
    PAYOUT_HISTORY_PAGE_SIZE,
    PRIZE_LIST_LIMIT,
    RECONCILIATION_LIST_LIMIT,
)
from app.models.enums import PayoutReferenceType, PrizePayoutStatus
from app.services.payout import (
    PayoutQueueService,
    PayoutReconciliationService,
    SettlementService,
)
from app.utils.exceptions import ValidationError


routes = web.RouteTableDef()


@routes.get("/api/payouts/queue")
async def list_queue(request: web.Request) -> web.Response:
    service = PayoutQueueService(get_session(request), get_publisher(request))
    entries = await service.list_queue()
    return web.json_response({"queue": [queue_entry_to_dict(e) for e in entries]})


@routes.post("/api/payouts/queue")
async def enqueue_game_payout(request: web.Request) -> web.Response:
    """Queue a game payout."""
    body = await read_json(request)
    service = PayoutQueueService(get_session(request), get_publisher(request))
    entry = await service.enqueue(
        user_id=require_int(body, "user_id"),
        amount=require_amount(body),
        reason=optional_str(body, "reason") or "",
        reference_type=PayoutReferenceType.GAME,
        reference_id=optional_int(body, "reference_id"),
    )
    return web.json_response(queue_entry_to_dict(entry), status=201)


@routes.get("/api/payouts/history")
async def list_history(request: web.Request) -> web.Response:
    service = SettlementService(get_session(request), get_publisher(request))
    records = await service.list_history(
        query_limit(request, PAYOUT_HISTORY_PAGE_SIZE)
    )
    return web.json_response({"history": [history_to_dict(r) for r in records]})


@routes.get("/api/payouts/stats")
async def queue_stats(request: web.Request) -> web.Response:
    service = PayoutQueueService(get_session(request), get_publisher(request))
    return web.json_response(queue_stats_to_dict(await service.get_stats()))


@routes.post(r"/api/payouts/queue/{id:\d+}/settle")
async def settle(request: web.Request) -> web.Response:
    """Mark a queued payout as sent."""
    body = await read_json(request)
    service = SettlementService(get_session(request), get_publisher(request))
    record = await service.settle(
        path_id(request),
        confirmation_number=optional_str(body, "confirmation_number"),
        notes=optional_str(body, "notes"),
        payment_method=optional_str(body, "payment_method"),
        paid_by=get_operator(request),
    )
    return web.json_response(history_to_dict(record))


@routes.get("/api/prizes")
async def list_prizes(request: web.Request) -> web.Response:
    raw_status = request.query.get("status")
    try:
        status = PrizePayoutStatus(raw_status) if raw_status else None
    except ValueError as e:
        raise ValidationError(f"Unknown prize status: {raw_status}") from e

    service = PayoutQueueService(get_session(request), get_publisher(request))
    prizes = await service.list_prizes(status, limit=PRIZE_LIST_LIMIT)
    return web.json_response({"prizes": [prize_to_dict(p) for p in prizes]})


@routes.post("/api/prizes")
async def record_prize(request: web.Request) -> web.Response:
    """Record a weekly prize win, pending verification."""
    body = await read_json(request)
    service = PayoutQueueService(get_session(request), get_publisher(request))
    prize = await service.record_prize(
        user_id=require_int(body, "user_id"),
        amount=require_amount(body),
        prize_label=optional_str(body, "prize_label") or "",
    )
    return web.json_response(prize_to_dict(prize), status=201)


@routes.post(r"/api/prizes/{id:\d+}/verify")
async def verify_prize(request: web.Request) -> web.Response:
    """Verify a prize win and queue its payout."""
    service = PayoutQueueService(get_session(request), get_publisher(request))
    entry = await service.queue_prize(path_id(request))
    return web.json_response(queue_entry_to_dict(entry), status=201)


@routes.get("/api/payouts/reconciliations")
async def list_reconciliations(request: web.Request) -> web.Response:
    service = PayoutReconciliationService(get_session(request), get_publisher(request))
    records = await service.list_reconciliations(
        query_limit(request, RECONCILIATION_LIST_LIMIT)
    )
    return web.json_response(
        {"reconciliations": [payout_reconciliation_to_dict(r) for r in records]}
    )


@routes.post("/api/payouts/reconciliations")
async def create_reconciliation(request: web.Request) -> web.Response:
    """Compare a period's system payout total with the verified total."""
    body = await read_json(request)
    service = PayoutReconciliationService(get_session(request), get_publisher(request))
    record = await service.create_reconciliation(
        period_label=optional_str(body, "period_label") or "",
        period_start=require_timestamp(body, "period_start"),
        period_end=require_timestamp(body, "period_end"),
        verified_total=require_amount(body, "verified_total", allow_zero=True),
        payment_method=optional_str(body, "payment_method"),
        created_by=get_operator(request),
    )
    return web.json_response(payout_reconciliation_to_dict(record), status=201)


@routes.post(r"/api/payouts/reconciliations/{id:\d+}/resolve")
async def resolve_reconciliation(request: web.Request) -> web.Response:
    body = await read_json(request)
    service = PayoutReconciliationService(get_session(request), get_publisher(request))
    record = await service.resolve(
        path_id(request),
        resolution_notes=optional_str(body, "resolution_notes") or "",
        resolved_by=get_operator(request),
    )
    return web.json_response(payout_reconciliation_to_dict(record))

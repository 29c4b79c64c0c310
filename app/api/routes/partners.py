"""Partner ledger routes."""

from aiohttp import web

from app.api.helpers import (
    get_operator,
    get_publisher,
    get_session,
    optional_str,
    path_id,
    read_json,
    require_amount,
)
from app.api.serializers import partner_balance_to_dict, partner_transaction_to_dict
from app.services.partner import PartnerAllocationService, PartnerLedger


routes = web.RouteTableDef()


@routes.get("/api/partners")
async def list_partners(request: web.Request) -> web.Response:
    """Partners with allocated, withdrawn and balance."""
    summaries = await PartnerLedger(get_session(request)).summaries()
    return web.json_response(
        {"partners": [partner_balance_to_dict(s) for s in summaries]}
    )


@routes.post("/api/partners/allocate")
async def allocate(request: web.Request) -> web.Response:
    """Split an amount of available profit between active partners."""
    body = await read_json(request)
    service = PartnerAllocationService(get_session(request), get_publisher(request))
    transactions = await service.allocate(
        require_amount(body, "total_amount"),
        allocated_by=get_operator(request),
    )
    return web.json_response(
        {"transactions": [partner_transaction_to_dict(t) for t in transactions]},
        status=201,
    )


@routes.post(r"/api/partners/{id:\d+}/withdraw")
async def withdraw(request: web.Request) -> web.Response:
    body = await read_json(request)
    service = PartnerAllocationService(get_session(request), get_publisher(request))
    withdrawal = await service.withdraw(
        path_id(request),
        require_amount(body, "amount"),
        payment_method=optional_str(body, "payment_method"),
        payment_handle=optional_str(body, "payment_handle"),
        confirmation_number=optional_str(body, "confirmation_number"),
        notes=optional_str(body, "notes"),
        withdrawn_by=get_operator(request),
    )
    return web.json_response(partner_transaction_to_dict(withdrawal), status=201)

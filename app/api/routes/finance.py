"""Finance summary and cash reconciliation routes."""

from aiohttp import web

from app.api.helpers import (
    get_operator,
    get_publisher,
    get_session,
    query_limit,
    read_json,
    require_balance,
)
from app.api.serializers import (
    cash_position_to_dict,
    cash_reconciliation_result_to_dict,
    cash_reconciliation_to_dict,
    summary_to_dict,
)
from app.config.operational_constants import RECONCILIATION_LIST_LIMIT
from app.services.accounting import CashReconciliationService, ProfitCalculator


routes = web.RouteTableDef()


@routes.get("/api/finance/summary")
async def financial_summary(request: web.Request) -> web.Response:
    summary = await ProfitCalculator(get_session(request)).summary()
    return web.json_response(summary_to_dict(summary))


@routes.get("/api/finance/cash")
async def cash_position(request: web.Request) -> web.Response:
    """Calculated vs. actual balance and the reconciliation log."""
    service = CashReconciliationService(get_session(request), get_publisher(request))
    view = await service.get_position()
    log = await service.list_reconciliations(
        query_limit(request, RECONCILIATION_LIST_LIMIT)
    )
    payload = cash_position_to_dict(view)
    payload["reconciliations"] = [cash_reconciliation_to_dict(r) for r in log]
    return web.json_response(payload)


@routes.post("/api/finance/cash/reconcile")
async def reconcile_cash(request: web.Request) -> web.Response:
    """Align the calculated balance with the observed bank balance."""
    body = await read_json(request)
    service = CashReconciliationService(get_session(request), get_publisher(request))
    result = await service.reconcile(
        require_balance(body, "observed_balance"),
        reconciled_by=get_operator(request),
    )
    return web.json_response(cash_reconciliation_result_to_dict(result))

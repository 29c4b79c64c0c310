"""Matrix routes."""

from aiohttp import web

from app.api.helpers import (
    get_publisher,
    get_session,
    optional_int,
    optional_str,
    path_id,
    query_limit,
    read_json,
    require_int,
)
from app.api.serializers import matrix_to_dict, placement_to_dict
from app.config.operational_constants import MATRIX_LIST_LIMIT
from app.services.matrix import CompletionDetector, MatrixStore, PlacementResolver


routes = web.RouteTableDef()


@routes.post("/api/matrices")
async def create_matrix(request: web.Request) -> web.Response:
    """Open a matrix for an owner."""
    body = await read_json(request)
    store = MatrixStore(get_session(request), get_publisher(request))
    entry = await store.create_matrix(
        owner_id=require_int(body, "owner_id"),
        campaign_id=optional_int(body, "campaign_id"),
    )
    return web.json_response(matrix_to_dict(entry), status=201)


@routes.post("/api/matrices/place")
async def place_participant(request: web.Request) -> web.Response:
    """Place a participant by referral priority, then FIFO."""
    body = await read_json(request)
    resolver = PlacementResolver(get_session(request), get_publisher(request))
    result = await resolver.place(
        require_int(body, "participant_id"),
        referrer_handle=optional_str(body, "referrer_handle"),
    )
    return web.json_response(placement_to_dict(result))


@routes.get("/api/matrices")
async def list_matrices(request: web.Request) -> web.Response:
    store = MatrixStore(get_session(request), get_publisher(request))
    entries = await store.list_matrices(
        request.query.get("filter", "all"),
        limit=query_limit(request, MATRIX_LIST_LIMIT),
    )
    return web.json_response({"matrices": [matrix_to_dict(e) for e in entries]})


@routes.get("/api/matrices/stats")
async def matrix_stats(request: web.Request) -> web.Response:
    store = MatrixStore(get_session(request), get_publisher(request))
    return web.json_response(await store.get_stats())


@routes.get(r"/api/matrices/{id:\d+}")
async def get_matrix(request: web.Request) -> web.Response:
    store = MatrixStore(get_session(request), get_publisher(request))
    entry = await store.get_matrix(path_id(request))
    return web.json_response(matrix_to_dict(entry))


@routes.post(r"/api/matrices/{id:\d+}/check-completion")
async def check_completion(request: web.Request) -> web.Response:
    """Re-run completion detection for one matrix."""
    detector = CompletionDetector(get_session(request), get_publisher(request))
    completed = await detector.check_completion(path_id(request))
    return web.json_response({"matrix_id": path_id(request), "completed": completed})

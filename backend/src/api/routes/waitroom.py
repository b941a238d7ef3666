# src/api/routes/waitroom.py
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from infrastructure.queue.codec import encode_identity, encode_queue
from infrastructure.queue.config import WaitRoomConfig
from infrastructure.queue.errors import AssetNotFoundError, QueueStoreError
from infrastructure.queue.metrics import PrometheusWaitRoomMetrics
from infrastructure.queue.models import VisitorEntry
from service.waitroom import WaitRoomService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["waitroom"])

SECURITY_HEADERS = {
    "X-XSS-Protection": "1; mode=block",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "unsafe-url",
    "Feature-Policy": "none",
}

WAITROOM_PAGE = "waitroom.html"
THANKYOU_PAGE = "thankyou.html"
NOT_FOUND_PAGE = "404.html"


# DI
_service: Optional[WaitRoomService] = None


async def init_waitroom_runtime(config: Optional[WaitRoomConfig] = None) -> None:  # called from lifespan
    global _service
    _service = WaitRoomService(config=config)
    await _service.start()


async def shutdown_waitroom_runtime() -> None:
    global _service
    if _service is not None:
        await _service.close()
        _service = None


def get_service() -> WaitRoomService:
    if _service is None:
        raise RuntimeError("waiting room runtime not initialized")
    return _service


# ---- response shaping ----


def _shape(resp: Response, cfg: WaitRoomConfig, identity: Optional[VisitorEntry] = None) -> Response:
    for k, v in SECURITY_HEADERS.items():
        resp.headers[k] = v
    if cfg.debug:
        resp.headers["Cache-Control"] = "no-store"
    if identity is not None:
        resp.set_cookie(cfg.cookie_name, encode_identity(identity), path="/", httponly=True, samesite="lax")
    return resp


def _error_response(cfg: WaitRoomConfig, exc: Exception) -> Response:
    if cfg.debug:
        return PlainTextResponse(str(exc) or exc.__class__.__name__, status_code=500)
    return PlainTextResponse("Service temporarily unavailable", status_code=503)


async def _not_found(svc: WaitRoomService, exc: AssetNotFoundError) -> Response:
    if svc.config.debug:
        return PlainTextResponse(str(exc), status_code=500)
    try:
        page = await svc.assets.page(NOT_FOUND_PAGE)
    except AssetNotFoundError:
        return PlainTextResponse("Not Found", status_code=404)
    return Response(page.body, status_code=404, media_type=page.media_type)


async def _serve_page(svc: WaitRoomService, name: str) -> Response:
    try:
        page = await svc.assets.page(name)
    except AssetNotFoundError as e:
        return await _not_found(svc, e)
    return Response(page.body, status_code=200, media_type=page.media_type)


async def _serve_content(svc: WaitRoomService, path: str) -> Response:
    try:
        asset = await svc.assets.fetch(path)
    except AssetNotFoundError as e:
        return await _not_found(svc, e)
    return Response(asset.body, status_code=200, media_type=asset.media_type)


# ---- handlers ----


async def _handle_waitroom(svc: WaitRoomService, request: Request) -> Response:
    _, result = await svc.enter(request)
    if result.admitted:
        resp = await _serve_content(svc, request.url.path)
    else:
        resp = await _serve_page(svc, WAITROOM_PAGE)
    resp.headers["X-Queue-Position"] = str(result.position)
    return _shape(resp, svc.config, result.entry)


async def _handle_queue_stat(svc: WaitRoomService) -> Response:
    snap = await svc.status()
    resp = Response(encode_queue(snap.entries), status_code=200, media_type="application/json")
    resp.headers["X-Queue-Length"] = str(snap.length)
    resp.headers["X-Queue-Waiting"] = str(snap.waiting)
    return _shape(resp, svc.config)


async def _handle_thankyou(svc: WaitRoomService, request: Request) -> Response:
    ident = await svc.leave(request)
    resp = await _serve_page(svc, THANKYOU_PAGE)
    return _shape(resp, svc.config, ident.entry)


async def _handle_normally(svc: WaitRoomService, request: Request) -> Response:
    ident = svc.track(request)
    resp = await _serve_content(svc, request.url.path)
    return _shape(resp, svc.config, ident.entry)


@router.get("/metrics", include_in_schema=False)
async def metrics(request: Request, svc: WaitRoomService = Depends(get_service)) -> Response:
    if not isinstance(svc.metrics, PrometheusWaitRoomMetrics):
        return await gate(request, svc)
    return Response(generate_latest(svc.metrics.registry), media_type=CONTENT_TYPE_LATEST)


@router.api_route("/{full_path:path}", methods=["GET", "HEAD", "POST"], include_in_schema=False)
async def gate(request: Request, svc: WaitRoomService = Depends(get_service)) -> Response:
    """
    Path dispatch:
    - protected path: admit (site content) or wait (holding page)
    - status path: current queue as a JSON array
    - exit path: leave the queue, thank-you page
    - anything else: site content, identity cookie still refreshed
    """
    cfg = svc.config
    path = request.url.path
    try:
        if path == cfg.protected_path:
            return await _handle_waitroom(svc, request)
        if path == cfg.status_path:
            if request.method not in ("GET", "HEAD"):
                resp = PlainTextResponse("Method Not Allowed", status_code=405, headers={"Allow": "GET, HEAD"})
                return _shape(resp, cfg)
            return await _handle_queue_stat(svc)
        if path == cfg.exit_path:
            return await _handle_thankyou(svc, request)
        return await _handle_normally(svc, request)
    except QueueStoreError as e:
        logger.exception("Queue store failure on %s: %s", path, e)
        return _shape(_error_response(cfg, e), cfg)
    except Exception as e:
        logger.exception("Unhandled error on %s", path)
        body = (str(e) or e.__class__.__name__) if cfg.debug else "Internal Server Error"
        return _shape(PlainTextResponse(body, status_code=500), cfg)

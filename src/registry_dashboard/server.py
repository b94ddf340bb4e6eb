"""HTTP surface of the dashboard: push API, log streams, delete API and proxy."""

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiohttp
from aiohttp import web

from .config import DashboardConfig
from .core.registry_client import RegistryClient
from .core.runner import CommandRunner
from .core.sessions import SessionRegistry
from .core.types import EventType
from .exceptions import (
    DeleteFailed,
    ManifestNotFound,
    RegistryConnectionError,
    ValidationError,
)
from .push import PushOrchestrator, format_push_commands
from .registry import delete_image
from .utils.reference import is_valid_image_reference, is_valid_repository, is_valid_tag

logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("config", DashboardConfig)
SESSIONS_KEY = web.AppKey("sessions", SessionRegistry)
ORCHESTRATOR_KEY = web.AppKey("orchestrator", PushOrchestrator)
HTTP_SESSION_KEY = web.AppKey("http_session", aiohttp.ClientSession)
REGISTRY_CLIENT_KEY = web.AppKey("registry_client", RegistryClient)

PROXY_CHUNK_SIZE = 64 * 1024

# Headers that describe a single connection and must not be forwarded
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "host",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailer",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

SSE_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}


async def _json_body(request: web.Request) -> dict[str, Any]:
    try:
        body = await request.json()
    except ValueError as e:
        # Covers both malformed JSON and bodies that are not valid UTF-8
        raise ValidationError("request body must be JSON") from e
    if not isinstance(body, dict):
        raise ValidationError("request body must be a JSON object")
    return body


# -----------------------------
# Push
# -----------------------------
async def handle_push(request: web.Request) -> web.Response:
    body = await _json_body(request)
    image = body.get("image")
    if not image:
        raise ValidationError("image is required")
    if not is_valid_image_reference(image):
        raise ValidationError("invalid image reference")
    session_id = body.get("sessionId")
    if session_id is not None and not isinstance(session_id, str):
        raise ValidationError("sessionId must be a string")

    orchestrator = request.app[ORCHESTRATOR_KEY]
    # An abandoned request still completes the push
    result = await asyncio.shield(orchestrator.push(image, session_id))
    return web.json_response(result.to_dict(), status=200 if result.ok else 500)


async def handle_push_stream(request: web.Request) -> web.StreamResponse:
    """Stream log/status/close events for one session as Server-Sent Events."""
    session_id = request.match_info["session_id"]
    sessions = request.app[SESSIONS_KEY]
    heartbeat = request.app[CONFIG_KEY].stream_heartbeat

    channel = sessions.register(session_id)
    response = web.StreamResponse(headers=SSE_HEADERS)
    try:
        await response.prepare(request)
        await response.write(b": connected\n\n")
        while True:
            try:
                event = await asyncio.wait_for(channel.get(), timeout=heartbeat)
            except asyncio.TimeoutError:
                await response.write(b": keepalive\n\n")
                continue
            if event is None:
                break
            await response.write(event.to_sse())
            if event.type is EventType.CLOSE:
                break
    except ConnectionResetError:
        logger.info("Stream for session %r disconnected", session_id)
    finally:
        sessions.unregister(session_id, channel)
    return response


async def handle_commands(request: web.Request) -> web.Response:
    image = request.query.get("image", "")
    if not image:
        raise ValidationError("image is required")
    if not is_valid_image_reference(image):
        raise ValidationError("invalid image reference")
    config = request.app[CONFIG_KEY]
    return web.json_response({"commands": format_push_commands(image, config.registry_host)})


# -----------------------------
# Registry
# -----------------------------
async def handle_delete(request: web.Request) -> web.Response:
    body = await _json_body(request)
    repo, tag = body.get("repo"), body.get("tag")
    if not repo or not tag:
        raise ValidationError("repo and tag are required")
    if not is_valid_repository(repo) or not is_valid_tag(tag):
        raise ValidationError("invalid repo or tag")

    try:
        digest = await delete_image(request.app[REGISTRY_CLIENT_KEY], repo, tag)
    except ManifestNotFound as e:
        logger.warning("Manifest lookup for %s:%s failed: %s", repo, tag, e)
        return web.json_response(
            {"error": "manifest fetch failed", "status": e.status}, status=500
        )
    except DeleteFailed as e:
        logger.warning("Delete of %s:%s failed: %s", repo, tag, e)
        return web.json_response(
            {"error": "manifest delete failed", "status": e.status}, status=500
        )
    except RegistryConnectionError as e:
        logger.error("Registry request failed: %s", e)
        return web.json_response({"error": "registry request failed"}, status=500)

    return web.json_response({"result": "deleted", "digest": digest})


async def handle_health(request: web.Request) -> web.Response:
    reachable = await request.app[REGISTRY_CLIENT_KEY].check_registry_v2()
    return web.json_response({"status": "ok", "registry": reachable})


async def handle_registry_proxy(request: web.Request) -> web.StreamResponse:
    """Forward a /v2/ request to the upstream registry unchanged."""
    config = request.app[CONFIG_KEY]
    session = request.app[HTTP_SESSION_KEY]
    url = f"{config.registry_url}{request.rel_url}"
    headers = [
        (name, value)
        for name, value in request.headers.items()
        if name.lower() not in HOP_BY_HOP_HEADERS
    ]
    data = request.content if request.body_exists else None

    response: web.StreamResponse | None = None
    try:
        async with session.request(
            request.method, url, headers=headers, data=data, allow_redirects=False
        ) as upstream:
            response = web.StreamResponse(status=upstream.status, reason=upstream.reason)
            for name, value in upstream.headers.items():
                if name.lower() not in HOP_BY_HOP_HEADERS:
                    response.headers.add(name, value)
            await response.prepare(request)
            async for chunk in upstream.content.iter_chunked(PROXY_CHUNK_SIZE):
                await response.write(chunk)
            await response.write_eof()
            return response
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error("Proxy %s %s failed: %s", request.method, url, e)
        if response is not None and response.prepared:
            return response
        return web.json_response({"error": "registry unreachable"}, status=502)


# -----------------------------
# UI
# -----------------------------
async def handle_ui(request: web.Request) -> web.StreamResponse:
    """Serve the UI bundle, falling back to index.html for client-side routes."""
    tail = request.match_info["tail"]
    if tail == "api" or tail.startswith("api/"):
        return web.json_response({"error": "not found"}, status=404)

    static_dir: Path = request.app[CONFIG_KEY].static_dir.resolve()
    if tail:
        candidate = (static_dir / tail).resolve()
        if candidate.is_relative_to(static_dir) and candidate.is_file():
            return web.FileResponse(candidate)

    index = static_dir / "index.html"
    if not index.is_file():
        return web.json_response({"error": "UI bundle not found"}, status=404)
    return web.FileResponse(index)


async def handle_preflight(request: web.Request) -> web.Response:
    return web.Response(status=204)


# -----------------------------
# Middleware and lifecycle
# -----------------------------
@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except ValidationError as e:
        return web.json_response({"error": str(e)}, status=400)
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response({"error": "internal server error"}, status=500)


async def add_cors_headers(request: web.Request, response: web.StreamResponse) -> None:
    origin = request.app[CONFIG_KEY].cors_origin
    if not origin:
        return
    response.headers.setdefault("Access-Control-Allow-Origin", origin)
    response.headers.setdefault("Access-Control-Allow-Methods", "GET, POST, DELETE, OPTIONS")
    response.headers.setdefault("Access-Control-Allow-Headers", "Content-Type")


async def registry_session_ctx(app: web.Application):
    config = app[CONFIG_KEY]
    # Blob transfers through the proxy may be long; only bound the connect phase
    session = aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=None, sock_connect=config.request_timeout),
        auto_decompress=False,
    )
    app[HTTP_SESSION_KEY] = session
    app[REGISTRY_CLIENT_KEY] = RegistryClient(
        config.registry_url, timeout=config.request_timeout, session=session
    )
    yield
    await session.close()


def create_app(
    config: DashboardConfig | None = None, runner: CommandRunner | None = None
) -> web.Application:
    """Build the dashboard application.

    Args:
        config: Settings; read from the environment when omitted
        runner: Command runner used for pushes; defaults to the docker CLI

    Returns:
        Configured aiohttp application
    """
    config = config or DashboardConfig.from_env()
    runner = runner or CommandRunner(config.docker_bin, timeout=config.command_timeout)
    sessions = SessionRegistry()

    app = web.Application(middlewares=[error_middleware])
    app[CONFIG_KEY] = config
    app[SESSIONS_KEY] = sessions
    app[ORCHESTRATOR_KEY] = PushOrchestrator(runner, sessions, config.registry_host)
    app.cleanup_ctx.append(registry_session_ctx)
    app.on_response_prepare.append(add_cors_headers)

    app.router.add_post("/api/push", handle_push)
    app.router.add_get("/api/push-stream/{session_id}", handle_push_stream)
    app.router.add_delete("/api/delete", handle_delete)
    app.router.add_get("/api/commands", handle_commands)
    app.router.add_get("/api/health", handle_health)
    app.router.add_route("OPTIONS", "/api/{tail:.*}", handle_preflight)
    app.router.add_route("*", "/v2/{tail:.*}", handle_registry_proxy)
    app.router.add_get("/{tail:.*}", handle_ui)
    return app

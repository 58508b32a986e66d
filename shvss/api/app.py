"""HTTP front-end: subscription actions and the aggregated video list.

Failures on these routes are reported as plain-text ``ERROR::...`` bodies
with status 200, which is what the browser client expects.
"""

import json
from typing import List, Optional

import aiohttp
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response

from .. import PROGRAM_NAME, __version__
from ..config.subscriptions import JSON_INDENT, SubscriptionStore
from ..errors import ShvssError
from ..ingestion.interfaces import Subscription, subscriptions_to_dict
from ..ingestion.platforms import RumbleClient
from ..pipeline.aggregator import FeedAggregator, aggregate_from_store

logger = structlog.get_logger()


def indented_json(data) -> Response:
    return Response(content=json.dumps(data, indent=JSON_INDENT), media_type="application/json")


def error_text(operation: str, error: Exception) -> PlainTextResponse:
    return PlainTextResponse(f"ERROR::{operation}::{error}\n")


async def run_subs_action(
    store: SubscriptionStore,
    action: str,
    value: str,
    service: str
) -> List[Subscription]:
    """Dispatch one /subs request body onto the store."""
    if action == "add":
        return await store.add_subscription(value, service)
    if action == "remove":
        return store.remove_subscription(value)
    if action != "list":
        logger.warning("subs_unknown_action", action=action)
    return store.list_subscriptions()


def create_app(
    store: Optional[SubscriptionStore] = None,
    session: Optional[aiohttp.ClientSession] = None,
    max_concurrency: Optional[int] = None
) -> FastAPI:
    """Build the application around a subscription store.

    ``session`` is shared by every outbound request when given; otherwise
    each request opens and closes its own.
    """
    app = FastAPI(title="shvss", version=__version__)
    app.state.store = store or SubscriptionStore(session=session)
    app.state.aggregator = FeedAggregator(session=session, max_concurrency=max_concurrency)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "program": PROGRAM_NAME, "version": __version__}

    @app.post("/subs")
    async def subs(request: Request):
        body = await request.body()
        try:
            payload = json.loads(body or b"{}")
        except json.JSONDecodeError as e:
            logger.warning("subs_body_invalid", error=str(e))
            payload = {}
        if not isinstance(payload, dict):
            payload = {}

        action = str(payload.get("Action") or "")
        try:
            subscriptions = await run_subs_action(
                app.state.store,
                action,
                str(payload.get("Value") or ""),
                str(payload.get("Service") or "")
            )
        except ShvssError as e:
            logger.error("subs_action_failed", action=action, error=str(e))
            return error_text(f"subs.{action or 'list'}", e)
        return indented_json(subscriptions_to_dict(subscriptions))

    @app.get("/videos")
    async def videos():
        try:
            result = await aggregate_from_store(app.state.store, app.state.aggregator)
        except ShvssError as e:
            logger.error("videos_failed", error=str(e))
            return error_text("videos", e)
        return indented_json(result.to_dict())

    @app.get("/rumbleEmbed")
    async def rumble_embed(data: str = ""):
        try:
            async with RumbleClient(session=session) as client:
                embed_url = await client.lookup_embed_url(data)
        except ShvssError as e:
            logger.warning("rumble_embed_lookup_failed", url=data, error=str(e))
            return PlainTextResponse("")
        return PlainTextResponse(embed_url)

    @app.get("/subsFile")
    async def subs_file():
        try:
            content = app.state.store.raw()
        except ShvssError as e:
            logger.error("subs_file_unreadable", error=str(e))
            return error_text("subsFile", e)
        return Response(content=content, media_type="application/json")

    return app

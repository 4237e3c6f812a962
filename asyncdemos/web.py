"""A small JSON web service, optionally backed by the counter actor."""

from __future__ import annotations

import argparse
import asyncio
import json
from dataclasses import asdict, dataclass
from typing import Any

from aiohttp import web

from asyncdemos import actor as counter_actor

HOST = "127.0.0.1"
PORT = 3001
GREETING = "Hello, World!"


@dataclass
class HelloJson:
    """The JSON body exchanged by the service."""

    message: str

    @classmethod
    def from_dict(cls, data: Any) -> HelloJson:
        """Build from decoded JSON; raise ValueError if it has no string ``message``."""
        if not isinstance(data, dict) or not isinstance(data.get("message"), str):
            raise ValueError("expected an object with a string 'message' field")
        return cls(message=data["message"])

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


def _is_json(content_type: str) -> bool:
    main, _, sub = content_type.partition("/")
    return main == "application" and (sub == "json" or sub.endswith("+json"))


def create_app(message: str | None = None, actor: Any = None) -> web.Application:
    """Build the application; ``/json`` reports the actor's count, or ``message``, or a greeting."""

    async def hello(request: web.Request) -> web.Response:
        return web.Response(text=GREETING)

    async def hello_json(request: web.Request) -> web.Response:
        if actor is not None:
            await counter_actor.increment_counter(actor)
            total = await counter_actor.get_counter(actor)
            reply = HelloJson(f"Counter: {total}")
        else:
            reply = HelloJson(message if message is not None else GREETING)
        return web.json_response(reply.to_dict())

    async def receive_json(request: web.Request) -> web.Response:
        if not _is_json(request.content_type):
            raise web.HTTPUnsupportedMediaType(
                text="Expected request with `Content-Type: application/json`"
            )
        try:
            data = await request.json()
        except ValueError as error:
            raise web.HTTPBadRequest(text=f"Failed to parse the request body as JSON: {error}")
        try:
            payload = HelloJson.from_dict(data)
        except ValueError as error:
            raise web.HTTPUnprocessableEntity(text=str(error))
        print(f"Received payload: {payload!r}")
        return web.Response()

    app = web.Application()
    app.router.add_get("/", hello)
    app.router.add_get("/json", hello_json)
    app.router.add_post("/json_post", receive_json)
    return app


async def _serve(host: str, port: int, message: str | None, use_actor: bool) -> None:
    actor = await counter_actor.start() if use_actor else None
    runner = web.AppRunner(create_app(message, actor))
    await runner.setup()
    try:
        await web.TCPSite(runner, host, port).start()
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()
        if actor is not None:
            actor.close()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run the JSON web service.")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--message", default=None, help="shared message served at /json")
    parser.add_argument("--actor", action="store_true", help="count /json requests")
    args = parser.parse_args(argv)
    try:
        asyncio.run(_serve(args.host, args.port, args.message, args.actor))
    except KeyboardInterrupt:
        pass
    return 0
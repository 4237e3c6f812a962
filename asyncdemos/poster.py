"""Posts a JSON greeting to the web service."""

from __future__ import annotations

import argparse
import asyncio

import aiohttp

from asyncdemos.web import GREETING, HelloJson

URL = "http://localhost:3001/json_post"


async def post_hello(url: str = URL, message: str = GREETING) -> int:
    """Post ``message`` as a HelloJson body to ``url`` and return the status code."""
    async with aiohttp.ClientSession() as session:
        async with session.post(url, json=HelloJson(message).to_dict()) as response:
            return response.status


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Post a JSON greeting.")
    parser.add_argument("--url", default=URL)
    parser.add_argument("--message", default=GREETING)
    args = parser.parse_args(argv)
    asyncio.run(post_hello(args.url, args.message))
    return 0
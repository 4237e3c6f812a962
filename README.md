# asyncdemos

Small, self-contained asyncio programs. Each one shows a single concurrency
pattern. There is also a counter actor and an async channel that you can reuse
in your own code.

## Installation

```
pip install .
```

For the test suite:

```
pip install ".[test]"
pytest
```

## The counter actor

`asyncdemos.actor` keeps a counter inside a background task. All access goes
through a bounded mailbox of commands (`Increment` and `Get`), so no other
task ever touches the state directly.

```python
import asyncio
from asyncdemos.actor import start, increment_counter, get_counter

async def demo():
    sender = await start()
    await increment_counter(sender)
    await increment_counter(sender)
    print(await get_counter(sender))  # 2
    sender.close()

asyncio.run(demo())
```

- `increment_counter` is fire-and-forget.
- `get_counter` sends a `Get` command and waits for the answer. It returns 0
  if the actor has stopped and cannot answer.
- Calling `close()` on the mailbox stops the actor. The actor also stops once
  the mailbox is garbage-collected.

## The channel

`asyncdemos.channel.Channel` is a FIFO channel that many senders and receivers
can share.

- `Channel(capacity)` makes a bounded channel. `Channel()` makes an unbounded
  one. A capacity below 1 raises `ValueError`.
- `await send(item)` waits for room while the channel is full.
- `await recv()` waits for an item.
- `close()` wakes every waiter. After that, `send` raises `ChannelClosed`.
  Receivers still get the items already queued, and then `recv` raises
  `ChannelClosed`.
- `len(channel)` gives the number of queued items, and `capacity()` gives the
  bound, or `None` for an unbounded channel.
- `async for item in channel` reads items until the channel is closed and empty.

## The commands

Each demo is installed as a command.

| Command | What it does |
| --- | --- |
| `asyncdemos-channel [--count N]` | A producer task sends `Message 0` … `Message N-1` through a bounded queue of 32 to the consumer, which prints each one. The default is 10 messages. |
| `asyncdemos-blocking` | Three tasks, each looping three times. The loops use `time.sleep`, then `asyncio.sleep`, then `asyncio.to_thread`. This runs once with a two-thread worker pool and once on a plain event loop. Every line carries a millisecond timestamp, so you can see which version lets the tasks interleave. |
| `asyncdemos-echo [--host H] [--port P] [--clients N]` | Starts a TCP echo server, by default on 127.0.0.1:3001. It then runs N concurrent clients (default 1), and each client sends `Hello, world!` and prints the echo. |
| `asyncdemos-commands [--host H] [--port P]` | A TCP server that answers `hello` at once and `calculate` after 0.25 s. It handles one command at a time per connection. A client sends `calculate` and then `hello`. |
| `asyncdemos-line-commands [--host H] [--port P]` | The same commands, read line by line. Replies go through a per-connection writer task, so a slow `calculate` does not hold up a later `hello`. |
| `asyncdemos-graceful [--host H] [--port P]` | A TCP echo server, by default on 127.0.0.1:3011. Two clients talk to it. A shutdown signal then stops it accepting, sends `server shutting down` to open connections, and waits for them to finish. |
| `asyncdemos-web [--host H] [--port P] [--message TEXT] [--actor]` | An aiohttp app, by default on 127.0.0.1:3001. Stop it with Ctrl-C. |
| `asyncdemos-poster [--url URL] [--message TEXT]` | Posts `{"message": ...}` to the web app's `/json_post`. The default URL is `http://localhost:3001/json_post`. |
| `asyncdemos-pipeline [--duration SECONDS]` | Runs the backpressure pipeline for the given time (default 5 s) and then prints its throughput and channel fill figures. |

To see a client and a server talk, run these in two terminals:

```
asyncdemos-web
asyncdemos-poster
```

### The web app

`asyncdemos.web.create_app(message=None, actor=None)` builds the application:

- `GET /` returns `Hello, World!` as plain text.
- `GET /json` returns `{"message": ...}`:
  - With an actor attached (`--actor` on the command line), it increments the
    counter and reports `Counter: N`.
  - Otherwise it returns the given message, or `Hello, World!` if none was given.
- `POST /json_post` takes a JSON body with a string `message` field and answers
  200. It answers:
  - 415 if the content type is not JSON,
  - 400 if the body is not valid JSON,
  - 422 if the `message` field is missing or is not a string.

`HelloJson` is the body type. It has `from_dict` and `to_dict`.

### The pipeline

`asyncdemos.pipeline.run(duration)` has three stages:

1. Five producers fill a channel bounded at 500,000 items.
2. Four level-1 processors group the values into batches.
3. One level-2 processor consumes the batches.

All stages report their rates to a reporter task, and a monitor records how
full each bounded channel is. When the time is up the pipeline shuts down in
order, and `run` returns the final `PipelineState`.

## Using the pieces

The servers and clients are ordinary coroutines, so you can use them from
your own code or tests:

- `asyncdemos.echo`: `serve`, `handle_echo`, `client`, `run_many`
- `asyncdemos.commands`: `serve`, `handle_commands`, `client`
- `asyncdemos.line_commands`: `serve`, `handle_connection`, `calculator_task`, `client`
- `asyncdemos.graceful`: `Shutdown` (with `trigger`, `wait` and `triggered`),
  `run_server`, `handle_connection`, `run_client`
- `asyncdemos.poster`: `post_hello`, which returns the HTTP status code
- `asyncdemos.blocking_compare`: `run_blocking_sleep`, `run_async_sleep` and
  `run_spawn_blocking`, each of which returns the seconds taken

## What it does not do

- The pipeline has no live graphical display. It prints one summary when it
  finishes.
- The pipeline's batch size and processing delay cannot be changed from the
  command line. They sit on `PipelineState` at their defaults: batches of 32
  and no delay.
- There is no gRPC service. The only request/response server is the aiohttp
  web app.
"""
Live Event Stream
=================

Websocket ``logsSubscribe`` feed for the launchpad program, decoded into
typed events and fanned out to registered callbacks.

Usage:
    stream = EventStream(config)
    stream.on(EventKind.TRADE, handle_trade)
    stream.on_all(lambda event: print(event.to_dict()))
    await stream.run(LogSubscription(config))
"""

import asyncio
import inspect
import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, DefaultDict, Dict, List, Optional

import aiohttp

from ..config import DEFAULT_CONFIG, LaunchpadConfig
from ..models import EventEnvelope, EventKind
from .decoder import EventDecoder

logger = logging.getLogger(__name__)

EventCallback = Callable[[EventEnvelope], Any]


@dataclass
class LogBatch:
    """Log lines of one confirmed transaction."""
    signature: str
    slot: int
    logs: List[str] = field(default_factory=list)
    err: Any = None


@dataclass
class StreamStats:
    batches: int = 0
    lines: int = 0
    events: int = 0
    callback_errors: int = 0
    by_kind: Dict[str, int] = field(default_factory=dict)

    @property
    def dropped(self) -> int:
        return self.lines - self.events


class LogSubscription:
    """
    Reconnecting ``logsSubscribe`` client.

    Async-iterate it to receive one LogBatch per notification.
    """

    def __init__(self, config: LaunchpadConfig = DEFAULT_CONFIG):
        self.config = config
        self.running = False
        self.reconnect_count = 0
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None

    def subscribe_message(self) -> dict:
        return {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "logsSubscribe",
            "params": [
                {"mentions": [self.config.program_id]},
                {"commitment": self.config.commitment},
            ],
        }

    @staticmethod
    def parse_notification(message: dict) -> Optional[LogBatch]:
        """LogBatch from a ``logsNotification`` message; None for anything else."""
        if not isinstance(message, dict) or message.get("method") != "logsNotification":
            return None
        result = (message.get("params") or {}).get("result") or {}
        value = result.get("value") or {}
        signature = value.get("signature")
        if not signature:
            return None
        return LogBatch(
            signature=signature,
            slot=(result.get("context") or {}).get("slot", 0),
            logs=value.get("logs") or [],
            err=value.get("err"),
        )

    async def __aiter__(self) -> AsyncIterator[LogBatch]:
        self.running = True
        while self.running:
            try:
                async with aiohttp.ClientSession() as session:
                    async with session.ws_connect(self.config.ws_url, heartbeat=20) as ws:
                        self._ws = ws
                        await ws.send_json(self.subscribe_message())
                        logger.info(f"Subscribed to logs of {self.config.program_id}")

                        async for msg in ws:
                            if not self.running:
                                break
                            if msg.type == aiohttp.WSMsgType.TEXT:
                                data = json.loads(msg.data)
                                if "result" in data and "id" in data:
                                    logger.info(f"Subscription confirmed - ID: {data['result']}")
                                    continue
                                batch = self.parse_notification(data)
                                if batch is not None:
                                    yield batch
                            elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                                break

            except (aiohttp.ClientError, asyncio.TimeoutError, json.JSONDecodeError) as e:
                logger.error(f"Log subscription error: {e}")
            finally:
                self._ws = None

            if self.running:
                self.reconnect_count += 1
                logger.info(
                    f"Reconnecting in {self.config.reconnect_delay:.0f}s... "
                    f"(attempt #{self.reconnect_count})"
                )
                await asyncio.sleep(self.config.reconnect_delay)

    async def stop(self):
        self.running = False
        if self._ws is not None:
            await self._ws.close()


class EventStream:
    """
    Decodes log batches and dispatches events to subscribers.

    Events of one transaction are dispatched in log order. A callback
    that raises is logged and skipped; it never stops the stream.
    """

    def __init__(
        self,
        config: LaunchpadConfig = DEFAULT_CONFIG,
        decoder: Optional[EventDecoder] = None,
        emit_unrecognized: bool = False,
    ):
        self.config = config
        self.decoder = decoder or EventDecoder(config.program_id, include_unrecognized=emit_unrecognized)
        self.stats = StreamStats()
        self._handlers: DefaultDict[EventKind, List[EventCallback]] = defaultdict(list)
        self._all_handlers: List[EventCallback] = []
        self._source = None

    def on(self, kind: EventKind, callback: EventCallback) -> EventCallback:
        self._handlers[kind].append(callback)
        return callback

    def on_all(self, callback: EventCallback) -> EventCallback:
        self._all_handlers.append(callback)
        return callback

    def off(self, callback: EventCallback):
        if callback in self._all_handlers:
            self._all_handlers.remove(callback)
        for handlers in self._handlers.values():
            if callback in handlers:
                handlers.remove(callback)

    async def handle_logs(self, signature: str, slot: int, logs: List[str]) -> List[EventEnvelope]:
        """Decode and dispatch one transaction's logs."""
        self.stats.batches += 1
        self.stats.lines += sum(1 for line in logs if "Program data:" in line)
        events = self.decoder.decode_logs(logs, signature, slot)
        for event in events:
            self.stats.events += 1
            self.stats.by_kind[event.kind.value] = self.stats.by_kind.get(event.kind.value, 0) + 1
            await self._dispatch(event)
        return events

    async def _dispatch(self, event: EventEnvelope):
        for callback in list(self._all_handlers) + list(self._handlers.get(event.kind, [])):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.stats.callback_errors += 1
                logger.error(f"Event callback {getattr(callback, '__name__', callback)} failed: {e}")

    async def run(self, source):
        """Consume an async iterator of LogBatch until it ends or stop() is called."""
        self._source = source
        logger.info("Event stream started")
        try:
            async for batch in source:
                if batch.err is not None:
                    logger.debug(f"Skipping failed transaction {batch.signature}")
                    continue
                await self.handle_logs(batch.signature, batch.slot, batch.logs)
        finally:
            self._source = None
            logger.info("Event stream stopped")

    async def stop(self):
        if self._source is not None and hasattr(self._source, "stop"):
            await self._source.stop()

    def get_stats(self) -> dict:
        return {
            'batches': self.stats.batches,
            'lines': self.stats.lines,
            'events': self.stats.events,
            'dropped': self.stats.dropped,
            'callback_errors': self.stats.callback_errors,
            'by_kind': dict(self.stats.by_kind),
        }

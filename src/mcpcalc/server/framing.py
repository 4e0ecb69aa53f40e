"""Server-Sent-Events framing for push-channel frames.

Every frame written to a stream is one of:

* a JSON-RPC response — ``data: <json>\\n\\n`` (default ``message`` event);
* the connection notice — ``event: connection`` carrying the assigned id;
* a liveness ping — the comment line ``:ping\\n\\n``.
"""

from __future__ import annotations

import json
from typing import Any

PING_FRAME = ":ping\n\n"
CONNECTION_EVENT = "connection"


def encode_message(message: Any) -> str:
    """Frame a JSON-serializable message as a default SSE ``message`` event."""
    return _frame(json.dumps(message, separators=(",", ":")))


def encode_event(event: str, data: Any) -> str:
    """Frame *data* under a named SSE event."""
    return f"event: {event}\n" + _frame(json.dumps(data, separators=(",", ":")))


def connection_notice(connection_id: str) -> str:
    return encode_event(CONNECTION_EVENT, {"type": CONNECTION_EVENT, "connectionId": connection_id})


def _frame(data: str) -> str:
    # json.dumps never emits raw newlines, so one data line suffices.
    return f"data: {data}\n\n"

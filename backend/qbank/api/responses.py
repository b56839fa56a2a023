"""Response Envelope — success payloads shared by every route.

Failure envelopes are produced by QBankError.to_response() and error_handlers.py.
"""

from typing import Any


def ok(data: Any = None, message: str | None = None, **meta: Any) -> dict:
    body: dict = {"success": True}
    if message:
        body["message"] = message
    body.update(meta)
    if data is not None:
        body["data"] = data
    return body

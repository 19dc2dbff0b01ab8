import json
from typing import Any, Optional
from fastapi import Request

JSON_CONTENT_TYPE = b"application/json"


class RequestBodyRecorder:
    """
    Keep a copy of JSON request bodies on the request state

    Error handlers run after the body stream has been consumed; the copy lets
    them pull identifying fields (email, id) out of the failing request.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        headers = dict(scope.get("headers") or [])
        if JSON_CONTENT_TYPE not in headers.get(b"content-type", b""):
            return await self.app(scope, receive, send)

        chunks = []
        scope.setdefault("state", {})["body_chunks"] = chunks

        async def recording_receive():
            message = await receive()
            if message["type"] == "http.request":
                chunks.append(message.get("body", b""))
            return message

        return await self.app(scope, recording_receive, send)


def recorded_json_body(request: Request) -> Optional[Any]:
    chunks = getattr(request.state, "body_chunks", None)
    if not chunks:
        return None
    try:
        return json.loads(b"".join(chunks))
    except ValueError:
        return None

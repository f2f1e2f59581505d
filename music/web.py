import json
import logging
import uuid
from functools import wraps

import flask
from werkzeug.exceptions import BadRequest

from . import errors, logs

L = logging.getLogger("music.web")


class Context:
    """The request a controller is answering, with the path parameters and a request id."""

    def __init__(self, request: flask.Request, params: dict, id: str):
        self.request = request
        self.params = params
        self.id = id

    def param(self, name: str) -> str:
        return self.params[name]

    def bind_json(self, cls):
        """
        Builds a `cls` out of the request body. Raises ValueError when the body
        is not JSON or does not describe a `cls`.
        """
        try:
            data = self.request.get_json(force=True)
        except BadRequest as e:
            raise ValueError(e.description) from e
        return cls.from_json(data)


def make_status(id, status="ok"):
    return {"data": {"id": id, "type": "status", "attributes": {"status": status}}}


def respond(payload, status):
    return flask.Response(
        json.dumps(payload, ensure_ascii=False, separators=(',', ':')),
        status=status,
        headers={
            "Content-Type": "application/json; charset=utf-8",
        }
    )


def controller(fn):
    """
    Adapts a function taking a Context and returning (status, payload, error)
    to a flask view.

    On error the diagnostic chain is logged and only its external message is
    sent. A 302 redirects to the payload, a string payload is wrapped in a
    status document, anything else is sent as JSON.
    """

    @wraps(fn)
    def wrapper(**params):
        c = Context(flask.request, params, uuid.uuid4().hex)
        code, payload, err = fn(c)
        if err is not None:
            if isinstance(err, errors.Chain):
                logs.info(err.pkg.log, "Error in API",
                          error=str(err), external=err.external, code=code, request_id=c.id)
                return respond({"error": errors.external(err)}, code)
            logs.info(L, "Error in API", error=str(err), code=code, request_id=c.id)
            return respond({"error": "unknown error :("}, code)
        if code == 302:
            return flask.redirect(payload, code=302)
        if isinstance(payload, str):
            payload = make_status(payload)
        return respond(payload, code)

    return wrapper

"""Canned Railway API responses for the fake session."""

import json
from unittest.mock import MagicMock


def make_response(status_code=200, payload=None, text=None):
    response = MagicMock()
    response.status_code = status_code
    if text is not None:
        response.json.side_effect = ValueError(f"Expecting value: {text[:20]!r}")
    else:
        response.json.return_value = payload
    return response


def deployments_payload(*deployment_ids):
    edges = [{"node": {"id": d, "status": "SUCCESS"}} for d in deployment_ids]
    return {"data": {"deployments": {"edges": edges}}}


def restart_payload(ack=True):
    return {"data": {"deploymentRestart": ack}}


def error_payload(message):
    return {"data": None, "errors": [{"message": message}]}


def sent_body(call):
    return json.loads(call.kwargs["data"])

from flask import jsonify


def json_response(message=None, data=None, code=200, errors=None, **extra):
    body = {"status": "success" if code < 400 else "error"}
    if message is not None:
        body["message"] = message
    if code < 400:
        body["data"] = data
    elif errors:
        body["errors"] = errors
    body.update(extra)
    resp = jsonify(body)
    resp.status_code = code
    return resp

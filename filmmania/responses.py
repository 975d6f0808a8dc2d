from flask import jsonify


def success(data=None, message=None, status=200, **extra):
    """Build the standard success envelope."""
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def success_list(items, message=None, status=200):
    return success(items, message=message, status=status, count=len(items))


def error(message, status=400, details=None):
    """Build the standard failure envelope."""
    body = {"success": False, "error": message}
    if details:
        body["details"] = details
    return jsonify(body), status

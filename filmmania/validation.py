"""Request body validation helpers. Failures collect into one field map."""

import math
import re

from flask import request

from filmmania.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _is_number(value):
    """JSON number that is finite; Flask accepts NaN and Infinity literals."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def json_body():
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError(details={"body": "Request body must be a JSON object"})
    return body


class Validator:
    def __init__(self, body):
        self.body = body
        self.errors = {}

    def string(self, field, required=True, min_length=1, max_length=None):
        value = self.body.get(field)
        if value is None:
            if required:
                self.errors[field] = f"{field} is required"
            return None
        if not isinstance(value, str) or len(value.strip()) < min_length:
            self.errors[field] = f"{field} must be a non-empty string"
            return None
        if max_length and len(value) > max_length:
            self.errors[field] = f"{field} must be at most {max_length} characters"
            return None
        return value.strip()

    def email(self, field="email"):
        value = self.string(field)
        if value is not None and not EMAIL_RE.match(value):
            self.errors[field] = f"{field} must be a valid email address"
            return None
        return value

    def integer(self, field, default=None, minimum=None, maximum=None):
        value = self.body.get(field)
        if value is None:
            return default
        if not _is_number(value) or int(value) != value:
            self.errors[field] = f"{field} must be an integer"
            return default
        value = int(value)
        if minimum is not None and value < minimum:
            self.errors[field] = f"{field} must be at least {minimum}"
        elif maximum is not None and value > maximum:
            self.errors[field] = f"{field} must be at most {maximum}"
        return value

    def number(self, field, default=None, minimum=None):
        value = self.body.get(field)
        if value is None:
            return default
        if not _is_number(value):
            self.errors[field] = f"{field} must be a finite number"
            return default
        if minimum is not None and value < minimum:
            self.errors[field] = f"{field} must be at least {minimum}"
        return value

    def boolean(self, field, default=False):
        value = self.body.get(field)
        if value is None:
            return default
        if not isinstance(value, bool):
            self.errors[field] = f"{field} must be a boolean"
            return default
        return value

    def raise_for_errors(self):
        if self.errors:
            raise ValidationError(details=self.errors)

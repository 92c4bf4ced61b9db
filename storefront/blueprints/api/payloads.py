"""Request payload helpers.

Accepts JSON bodies and multipart forms alike; the pydantic models in
``storefront.schemas`` do the field validation.
"""
from flask import request
from pydantic import ValidationError as PydanticValidationError

from storefront.errors import ValidationError


def request_data():
    if request.is_json:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data
    return request.form.to_dict()


def request_files():
    return [f for f in request.files.getlist("images") if f and f.filename]


def _describe(error):
    location = ".".join(str(part) for part in error["loc"])
    if error["type"] == "missing":
        return f"{location} is required"
    if error["type"] == "value_error":
        # Our own validators already name the field.
        return str(error["ctx"]["error"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def parse(model, data=None):
    """Validate ``data`` (the request body by default) into ``model``."""
    if data is None:
        data = request_data()
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e.errors()[0])) from e

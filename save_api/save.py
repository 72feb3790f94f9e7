"""
POST /api/save  (requires a session token)

Body:
  {
    "data":     <any JSON value or a string>,     optional
    "image":    "data:image/png;base64,...",      optional, plain base64 also accepted
    "filename": "photo.png"                       optional (required if SAVE_REQUIRE_FILENAME=true)
  }

Writes {user}/data.json (backing up the previous version first) and/or
{user}/img/{filename}. Responds with the keys written:

  {"success": true, "message": "...",
   "results": {"json": {"key", "saved", "backup", "pruned"},
               "image": {"key", "saved", "contentType", "url"?}}}
"""

import base64
import binascii
import json
import logging

from save_api import keys
from save_api.auth import authenticate
from save_api.endpoint import lambda_entry
from save_api.errors import BadRequest, StorageError
from save_api.web import error_response, json_response, method_not_allowed

logger = logging.getLogger(__name__)

METHODS = ("POST",)


def _present(value):
    # falsy scalars (0, false, "") count as missing; empty {} and [] are still saved
    if isinstance(value, (bool, int, float)):
        return bool(value)
    return value is not None and value != ""


def json_body(data):
    return data if isinstance(data, str) else json.dumps(data)


def prepare_image(image, filename, require_filename):
    """
    Validate an image upload and work out where it goes.

    Returns:
        tuple: (filename, content_type, raw_bytes)

    Raises:
        BadRequest: missing/unsafe filename or undecodable base64.
    """
    if not isinstance(image, str):
        raise BadRequest("image must be a base64 string")

    if _present(filename):
        if not keys.is_safe_filename(filename):
            raise BadRequest("filename must not contain path separators")
    elif require_filename:
        raise BadRequest("filename is required when providing image data")

    tag, payload = keys.split_data_url(image)
    try:
        raw = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError):
        raise BadRequest("image is not valid base64")
    if not raw:
        raise BadRequest("image is empty")

    if _present(filename):
        content_type = keys.infer_content_type(keys.file_extension(filename))
    else:
        filename = keys.generate_filename(tag)
        content_type = keys.infer_content_type(tag)
    return filename, content_type, raw


def handle(request, runtime):
    if request.method not in METHODS:
        return method_not_allowed()

    identity = authenticate(request, runtime.tokens)
    if identity is None:
        return error_response(401, "Unauthorized")
    username = identity.username

    settings = runtime.settings
    try:
        body = request.json()
        data = body.get("data")
        image = body.get("image")

        if not _present(data) and not _present(image):
            raise BadRequest("Either data (JSON) or image (base64) must be provided")

        upload = None
        if _present(image):
            upload = prepare_image(image, body.get("filename"), settings.require_filename)
    except BadRequest as e:
        return error_response(400, e.message)

    if not settings.storage.bucket:
        logger.error("S3_BUCKET not configured")
        return error_response(500, "Server configuration error")

    results = {}
    try:
        if _present(data):
            saved = runtime.backups.save_json(username, json_body(data))
            results["json"] = saved.to_dict()

        if upload is not None:
            filename, content_type, raw = upload
            key = keys.image_key(username, filename)
            runtime.store.put(key, raw, content_type)
            results["image"] = {"key": key, "saved": True, "contentType": content_type}
            if settings.live_url:
                results["image"]["url"] = f"{settings.live_url}/{key}"
    except StorageError as e:
        logger.error(f"Save failed for {username}: {e}")
        return error_response(500, "Failed to save data", message=str(e))

    logger.info(f"Saved {', '.join(sorted(results))} for {username}")
    return json_response(
        200,
        {"success": True, "message": "Data saved successfully", "results": results},
    )


lambda_handler = lambda_entry(handle, METHODS)

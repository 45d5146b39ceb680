"""
Media host helpers (Cloudinary).

Uploads are staged to a local temp file first; upload_on_cloudinary always
removes that file, whether the upload worked or not.
"""
from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


def configure(cloud_name: Optional[str], api_key: Optional[str], api_secret: Optional[str]) -> None:
    cloudinary.config(
        cloud_name=cloud_name,
        api_key=api_key,
        api_secret=api_secret,
        secure=True,
    )


def stash_upload(file: Optional[FileStorage], tmp_dir: str) -> Optional[str]:
    """Save an uploaded file under tmp_dir and return its path (None if no file)."""
    if file is None or not file.filename:
        return None
    os.makedirs(tmp_dir, exist_ok=True)
    name = secure_filename(file.filename) or "upload"
    path = os.path.join(tmp_dir, f"{uuid.uuid4().hex}-{name}")
    file.save(path)
    return path


def _remove_local(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        logger.warning("Could not remove temporary upload %s", path, exc_info=True)


def upload_on_cloudinary(local_file_path: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Upload a local file; returns the Cloudinary response (with "url",
    "public_id", ...) or None when there is nothing to upload or it failed.
    """
    if not local_file_path:
        return None
    try:
        return cloudinary.uploader.upload(local_file_path, resource_type="auto")
    except Exception:
        logger.exception("Upload of %s to Cloudinary failed", local_file_path)
        return None
    finally:
        _remove_local(local_file_path)


def delete_from_cloudinary(public_id: Optional[str]) -> Optional[Dict[str, Any]]:
    """Best-effort delete of a hosted asset; failures are logged, not raised."""
    if not public_id:
        return None
    try:
        response = cloudinary.uploader.destroy(public_id)
        logger.info("Deleted %s from Cloudinary: %s", public_id, response)
        return response
    except Exception:
        logger.exception("Deleting %s from Cloudinary failed", public_id)
        return None


def extract_public_id_from_url(url: Optional[str]) -> Optional[str]:
    """
    https://res.cloudinary.com/<cloud>/<resource_type>/<type>/v<version>/<public_id>.<format>
    -> <public_id> (last path segment without its extension)
    """
    if not url:
        return None
    segment = urlparse(url).path.rstrip("/").rsplit("/", 1)[-1]
    public_id = segment.split(".", 1)[0]
    return public_id or None

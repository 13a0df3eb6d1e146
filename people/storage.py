from __future__ import annotations

import logging
import uuid

from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename

from .models import Profile, Team


logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"
LOGO_FOLDER = "team-logos"
ALLOWED_IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}


class ImageUploadError(Exception):
    """Raised when an uploaded image is rejected or cannot be stored."""


def upload_image(folder: str, uploaded_file) -> tuple[str, str]:
    """
    Store an image under ``folder`` and return (stored name, public URL).
    """
    content_type = getattr(uploaded_file, "content_type", None)
    if content_type and content_type not in ALLOWED_IMAGE_TYPES:
        raise ImageUploadError(f"Unsupported image type: {content_type}")

    filename = get_valid_filename(uploaded_file.name or "image")
    name = default_storage.save(f"{folder}/{uuid.uuid4().hex}-{filename}", uploaded_file)
    url = default_storage.url(name)
    logger.info("Stored image %s", name)
    return name, url


def attach_avatar(profile: Profile, uploaded_file) -> Profile:
    _, url = upload_image(AVATAR_FOLDER, uploaded_file)
    profile.avatar_url = url
    profile.save(update_fields=["avatar_url", "updated_at"])
    return profile


def attach_team_logo(team: Team, uploaded_file) -> Team:
    _, url = upload_image(LOGO_FOLDER, uploaded_file)
    team.logo_url = url
    team.save(update_fields=["logo_url", "updated_at"])
    return team

from __future__ import annotations

from functools import wraps

from django.http import JsonResponse
from django.views.decorators.http import require_POST

from .models import Profile, Team
from .notifications import notification
from .storage import ImageUploadError, attach_avatar, attach_team_logo


def error_response(message: str, status: int, *, title: str = "Error", details=None) -> JsonResponse:
    body = {"error": message, "notification": notification(title, message, destructive=True)}
    if details is not None:
        body["details"] = details
    return JsonResponse(body, status=status)


def staff_api(view):
    """
    JSON endpoints sit inside the admin shell: signed-in staff only.
    """

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("Authentication required.", 401)
        if not request.user.is_staff:
            return error_response("Admin access required.", 403)
        return view(request, *args, **kwargs)

    return wrapper


@require_POST
@staff_api
def profile_avatar_api(request, profile_id: int):
    """
    POST /api/profiles/<id>/avatar/ (multipart, field "file")
    """
    profile = Profile.objects.filter(id=profile_id).first()
    if profile is None:
        return error_response("Profile not found.", 404)

    uploaded = request.FILES.get("file")
    if uploaded is None:
        return error_response("Missing file upload.", 400, title="Missing information")

    try:
        attach_avatar(profile, uploaded)
    except ImageUploadError as exc:
        return error_response(str(exc), 400, title="Error uploading image")

    return JsonResponse(
        {
            "success": True,
            "avatar_url": profile.avatar_url,
            "notification": notification("Avatar updated", "The profile picture has been uploaded."),
        }
    )


@require_POST
@staff_api
def team_logo_api(request, team_id: int):
    """
    POST /api/teams/<id>/logo/ (multipart, field "file")
    """
    team = Team.objects.filter(id=team_id).first()
    if team is None:
        return error_response("Team not found.", 404)

    uploaded = request.FILES.get("file")
    if uploaded is None:
        return error_response("Missing file upload.", 400, title="Missing information")

    try:
        attach_team_logo(team, uploaded)
    except ImageUploadError as exc:
        return error_response(str(exc), 400, title="Error uploading image")

    return JsonResponse(
        {
            "success": True,
            "logo_url": team.logo_url,
            "notification": notification("Logo updated", "The team logo has been uploaded."),
        }
    )

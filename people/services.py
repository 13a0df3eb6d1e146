from __future__ import annotations

from .models import Profile


def current_profile(user) -> Profile | None:
    """
    The Profile derived from the signed-in identity, if one has been linked.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    return Profile.objects.select_related("team").filter(user=user).first()

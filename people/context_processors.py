from .services import current_profile as _current_profile


def current_profile(request):
    return {"current_profile": _current_profile(getattr(request, "user", None))}

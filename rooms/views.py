import logging
from datetime import date as date_type

from django.conf import settings
from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.db import DatabaseError
from django.http import Http404
from django.shortcuts import redirect, render
from django.utils import timezone
from django.views.decorators.csrf import ensure_csrf_cookie

from people.occupants import (
    PREFERENCE_LABELS,
    PREFERENCE_OPTIONS,
    available_profiles,
    eligible_profiles,
    filter_by_preferences,
    group_by_team,
    search_profiles,
)

from .catalog import load_catalog
from .grid import Grid, build_grid, date_window, window_from_params
from .intents import drag_payload
from .models import Assignment, Bed
from .panel import EditPanel
from .repository import AssignmentRepository
from .services import AssignmentDraft, CatalogLoadError, default_stay_end


logger = logging.getLogger(__name__)


def _notify(request, notification: dict) -> None:
    text = notification["title"]
    if notification.get("description"):
        text = f"{text}: {notification['description']}"
    if notification["variant"] == "destructive":
        messages.error(request, text)
    else:
        messages.success(request, text)


@staff_member_required
@ensure_csrf_cookie
def grid_view(request):
    """
    Bed-by-date grid with the sidebar of people still waiting for a bed.
    """
    today = timezone.localdate()
    try:
        window = window_from_params(
            request.GET,
            today=today,
            default_days=settings.ROOMS_GRID_DAYS,
            max_days=settings.ROOMS_MAX_GRID_DAYS,
        )
    except ValueError:
        # Keep the default window if the query string is invalid.
        window = date_window(today, settings.ROOMS_GRID_DAYS)

    repository = AssignmentRepository()
    grid = Grid(window=window, rows=[])
    sidebar = []
    try:
        grid = build_grid(load_catalog(), repository.snapshot(), window)
        available = available_profiles(eligible_profiles(), repository.assigned_profile_ids())
    except CatalogLoadError as exc:
        messages.error(request, f"Error fetching data: {exc}")
        available = []
    except DatabaseError:
        logger.exception("Failed to load assignments for the grid")
        messages.error(request, "Error fetching data: could not load room assignments.")
        available = []

    query = (request.GET.get("q") or "").strip()
    selected_filters = {category: request.GET.getlist(category) for category in PREFERENCE_OPTIONS}
    available = filter_by_preferences(search_profiles(available, query), selected_filters)
    for group in group_by_team(available):
        sidebar.append((group, [(o, drag_payload(o)) for o in group.occupants]))

    return render(
        request,
        "rooms/grid.html",
        {
            "grid": grid,
            "window": window,
            "previous_window": window.previous(),
            "next_window": window.next(),
            "sidebar": sidebar,
            "query": query,
            "preference_options": [
                (category, PREFERENCE_LABELS[category], options) for category, options in PREFERENCE_OPTIONS.items()
            ],
            "selected_filters": selected_filters,
        },
    )


@staff_member_required
def assignment_list_view(request):
    assignments = (
        Assignment.objects.select_related("location", "bedroom", "bed")
        .prefetch_related("profiles")
        .order_by("-start_date", "-id")
    )
    return render(request, "rooms/assignment_list.html", {"assignments": assignments})


def _query_date(params, key: str, default: date_type) -> date_type:
    value = (params.get(key) or "").strip()
    try:
        return date_type.fromisoformat(value) if value else default
    except ValueError:
        logger.info("Ignoring malformed %s=%r in panel URL", key, value)
        return default


def _draft_from_query(params) -> AssignmentDraft:
    """
    Draft pre-filled from ``?profile=1,2&bed=3&start=YYYY-MM-DD&end=YYYY-MM-DD``
    (the panel URL returned by a drop). Unusable values fall back to defaults.
    """
    start = _query_date(params, "start", timezone.localdate())
    end = max(_query_date(params, "end", default_stay_end(start, settings.ROOMS_DEFAULT_STAY_DAYS)), start)

    profile_ids = tuple(int(p) for p in (params.get("profile") or "").split(",") if p.strip().isdigit())

    bed = None
    bed_str = (params.get("bed") or "").strip()
    if bed_str.isdigit():
        bed = Bed.objects.select_related("bedroom").filter(id=int(bed_str)).first()

    return AssignmentDraft(
        start_date=start,
        end_date=end,
        profile_ids=profile_ids,
        location_id=bed.bedroom.location_id if bed else None,
        bedroom_id=bed.bedroom_id if bed else None,
        bed_id=bed.id if bed else None,
    )


def _render_panel(request, panel: EditPanel, result=None):
    if request.method == "POST":
        form = panel.form(request.POST)
        form.is_valid()
        for name, errors in (result.errors if result else {}).items():
            if name in form.errors:
                continue
            form.add_error(name if name in form.fields else None, errors)
    else:
        form = panel.form()

    return render(
        request,
        "rooms/assignment_form.html",
        {"form": form, "panel": panel, "assignment": panel.record},
    )


@staff_member_required
@ensure_csrf_cookie
def assignment_create_view(request):
    repository = AssignmentRepository()
    panel = EditPanel.for_draft(repository, _draft_from_query(request.GET))

    if request.method == "POST":
        result = panel.save(request.POST)
        _notify(request, result.notification)
        if result.ok:
            return redirect("rooms:grid")
        return _render_panel(request, panel, result)

    return _render_panel(request, panel)


@staff_member_required
@ensure_csrf_cookie
def assignment_edit_view(request, assignment_id: int):
    repository = AssignmentRepository()
    try:
        panel = EditPanel.for_assignment(repository, assignment_id)
    except Assignment.DoesNotExist:
        raise Http404

    if request.method == "POST":
        result = panel.save(request.POST)
        _notify(request, result.notification)
        if result.ok:
            return redirect("rooms:grid")
        return _render_panel(request, panel, result)

    return _render_panel(request, panel)


@staff_member_required
def assignment_delete_view(request, assignment_id: int):
    repository = AssignmentRepository()
    try:
        panel = EditPanel.for_assignment(repository, assignment_id)
    except Assignment.DoesNotExist:
        raise Http404

    if request.method == "POST":
        result = panel.delete(confirmed=request.POST.get("confirm") == "yes")
        _notify(request, result.notification)
        if result.ok:
            return redirect("rooms:grid")
        return redirect("rooms:assignment_edit", assignment_id=assignment_id)

    return render(request, "rooms/assignment_confirm_delete.html", {"assignment": panel.record})

from __future__ import annotations

import json
import math
import logging
from datetime import date as date_type

from django.conf import settings
from django.db import DatabaseError
from django.http import JsonResponse
from django.urls import reverse
from django.utils import timezone
from django.utils.http import urlencode
from django.views.decorators.http import require_GET, require_POST

from people.api import error_response, staff_api
from people.models import Profile
from people.notifications import notification
from people.occupants import (
    PREFERENCE_OPTIONS,
    available_profiles,
    eligible_profiles,
    filter_by_preferences,
    group_by_team,
    search_profiles,
)

from .catalog import bed_options, bedroom_options, has_beds, load_catalog
from .grid import build_grid, window_from_params
from .intents import CreateAssignmentIntent, stage_draft
from .models import Assignment, Bed
from .panel import EditPanel
from .repository import AssignmentRepository
from .resize import DIRECTIONS, ResizeSession
from .services import AssignmentError, BedOverlapError, CatalogLoadError, InvalidDropPayloadError


logger = logging.getLogger(__name__)


def _parse_date(value) -> date_type:
    """
    Raises ValueError unless ``value`` is a YYYY-MM-DD string.
    """
    if not isinstance(value, str):
        raise ValueError("Expected a date string.")
    return date_type.fromisoformat(value.strip())


def _json_payload(request) -> dict:
    """
    Raises ValueError when the body is not a JSON object.
    """
    try:
        payload = json.loads(request.body.decode("utf-8") or "{}")
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValueError("Invalid JSON payload.") from exc
    if not isinstance(payload, dict):
        raise ValueError("Invalid JSON payload.")
    return payload


def _panel_response(result, *, success_status: int = 200) -> JsonResponse:
    if result.ok:
        return JsonResponse(result.to_dict(), status=success_status)
    return JsonResponse(result.to_dict(), status=result.status)


@require_GET
@staff_api
def catalog_api(request):
    """
    GET /api/catalog/

    Locations with their bedrooms and beds, ordered by name at every level.
    """
    try:
        catalog = load_catalog()
    except CatalogLoadError as exc:
        return error_response(str(exc), 500, title="Error fetching data")

    return JsonResponse({"locations": [loc.to_dict() for loc in catalog], "has_beds": has_beds(catalog)})


@require_GET
@staff_api
def bedroom_options_api(request, location_id: int):
    """
    GET /api/catalog/locations/<id>/bedrooms/
    """
    return JsonResponse({"bedrooms": bedroom_options(location_id)})


@require_GET
@staff_api
def bed_options_api(request, bedroom_id: int):
    """
    GET /api/catalog/bedrooms/<id>/beds/
    """
    return JsonResponse({"beds": bed_options(bedroom_id)})


@require_GET
@staff_api
def grid_api(request):
    """
    GET /api/grid/?start=YYYY-MM-DD[&days=N | &view=week]
    """
    try:
        window = window_from_params(
            request.GET,
            today=timezone.localdate(),
            default_days=settings.ROOMS_GRID_DAYS,
            max_days=settings.ROOMS_MAX_GRID_DAYS,
        )
    except ValueError as exc:
        return error_response(str(exc) or "Invalid date. Expected YYYY-MM-DD.", 400)

    repository = AssignmentRepository()
    try:
        catalog = load_catalog()
        grid = build_grid(catalog, repository.snapshot(), window)
    except CatalogLoadError as exc:
        return error_response(str(exc), 500, title="Error fetching data")
    except DatabaseError:
        logger.exception("Failed to load assignments for the grid")
        return error_response("Could not load room assignments.", 500, title="Error fetching data")

    return JsonResponse(grid.to_dict())


@require_GET
@staff_api
def occupants_api(request):
    """
    GET /api/occupants/[?q=text][&sleepSchedule=early_riser&...]

    Eligible people not yet assigned, grouped by team for the sidebar.
    """
    repository = AssignmentRepository()
    try:
        eligible = eligible_profiles()
        assigned = repository.assigned_profile_ids()
    except DatabaseError:
        logger.exception("Failed to load occupants")
        return error_response("Could not load people.", 500, title="Error fetching profiles")

    available = available_profiles(eligible, assigned)
    available = search_profiles(available, request.GET.get("q", ""))
    filters = {category: request.GET.getlist(category) for category in PREFERENCE_OPTIONS}
    available = filter_by_preferences(available, filters)

    return JsonResponse(
        {
            "eligible_count": len(eligible),
            "available_count": len(available),
            "groups": [group.to_dict() for group in group_by_team(available)],
        }
    )


@require_POST
@staff_api
def drop_api(request):
    """
    POST /api/grid/drop/
    Payload (JSON):
      - bed_id: int
      - date: YYYY-MM-DD
      - profile_id: int, or payload: the JSON string carried by the drag event

    Stages a draft for the edit panel; nothing is saved.
    """
    try:
        payload = _json_payload(request)
    except ValueError as exc:
        return error_response(str(exc), 400)

    bed_id = payload.get("bed_id")
    if isinstance(bed_id, bool) or not isinstance(bed_id, int):
        return error_response("bed_id must be an integer.", 400)
    try:
        target_date = _parse_date(payload.get("date"))
    except ValueError:
        return error_response("Invalid date. Expected YYYY-MM-DD.", 400)

    try:
        if "profile_id" in payload:
            profile_id = payload["profile_id"]
            if not isinstance(profile_id, int) or isinstance(profile_id, bool):
                raise InvalidDropPayloadError("profile_id must be an integer.")
            intent = CreateAssignmentIntent(profile_id=profile_id, bed_id=bed_id, target_date=target_date)
        else:
            intent = CreateAssignmentIntent.from_transport(
                payload.get("payload"), bed_id=bed_id, target_date=target_date
            )
        draft = stage_draft(intent)
    except InvalidDropPayloadError as exc:
        return error_response(str(exc), 400, title="Error processing drop")
    except Bed.DoesNotExist:
        return error_response("Bed not found.", 404, title="Error processing drop")
    except Profile.DoesNotExist:
        return error_response("Profile not found.", 404, title="Error processing drop")

    query = urlencode(_draft_query(draft))
    return JsonResponse(
        {
            "success": True,
            "draft": draft.to_dict(),
            "panel_url": f"{reverse('rooms:assignment_create')}?{query}",
        }
    )


def _draft_query(draft) -> dict:
    return {
        "profile": ",".join(str(pid) for pid in draft.profile_ids),
        "bed": draft.bed_id,
        "start": draft.start_date.isoformat(),
        "end": draft.end_date.isoformat(),
    }


@require_GET
@staff_api
def assignment_detail_api(request, assignment_id: int):
    """
    GET /api/assignments/<id>/
    """
    repository = AssignmentRepository()
    try:
        record = repository.get(assignment_id)
    except Assignment.DoesNotExist:
        return error_response("Assignment not found.", 404)
    return JsonResponse({"assignment": record.to_dict()})


@require_POST
@staff_api
def create_assignment_api(request):
    """
    POST /api/assignments/
    Payload (JSON):
      - profiles: [int, ...]
      - location, bedroom, bed: int
      - start_date, end_date: YYYY-MM-DD (inclusive)
      - notes: str (optional)
    """
    try:
        payload = _json_payload(request)
    except ValueError as exc:
        return error_response(str(exc), 400)

    panel = EditPanel.for_draft(AssignmentRepository())
    return _panel_response(panel.save(payload), success_status=201)


@require_POST
@staff_api
def update_assignment_api(request, assignment_id: int):
    """
    POST /api/assignments/<id>/update/
    Same payload as creation; profile links are replaced as a whole.
    """
    try:
        payload = _json_payload(request)
    except ValueError as exc:
        return error_response(str(exc), 400)

    try:
        panel = EditPanel.for_assignment(AssignmentRepository(), assignment_id)
    except Assignment.DoesNotExist:
        return error_response("Assignment not found.", 404)

    return _panel_response(panel.save(payload))


@require_POST
@staff_api
def delete_assignment_api(request, assignment_id: int):
    """
    POST /api/assignments/<id>/delete/
    Payload (JSON): {"confirm": true}
    """
    try:
        payload = _json_payload(request)
    except ValueError as exc:
        return error_response(str(exc), 400)

    try:
        panel = EditPanel.for_assignment(AssignmentRepository(), assignment_id)
    except Assignment.DoesNotExist:
        return error_response("Assignment not found.", 404)

    return _panel_response(panel.delete(confirmed=payload.get("confirm") is True))


@require_POST
@staff_api
def resize_assignment_api(request, assignment_id: int):
    """
    POST /api/assignments/<id>/resize/
    Payload (JSON), either:
      - direction: "left" | "right", delta_px: number
      - start_date, end_date: YYYY-MM-DD
    """
    try:
        payload = _json_payload(request)
    except ValueError as exc:
        return error_response(str(exc), 400)

    repository = AssignmentRepository()
    try:
        record = repository.get(assignment_id)
    except Assignment.DoesNotExist:
        return error_response("Assignment not found.", 404)

    try:
        if "direction" in payload:
            direction = payload.get("direction")
            delta_px = payload.get("delta_px")
            if direction not in DIRECTIONS:
                return error_response("direction must be 'left' or 'right'.", 400)
            if isinstance(delta_px, bool) or not isinstance(delta_px, (int, float)) or not math.isfinite(delta_px):
                return error_response("delta_px must be a finite number.", 400)
            session = ResizeSession(record, direction, 0)
            session.move(delta_px)
            saved = session.finish(repository)
        else:
            try:
                start = _parse_date(payload.get("start_date"))
                end = _parse_date(payload.get("end_date"))
            except ValueError:
                return error_response("Invalid date. Expected YYYY-MM-DD.", 400)
            saved = repository.update_dates(assignment_id, start, end)
    except BedOverlapError as exc:
        return error_response(str(exc), 409, title="Error updating assignment", details={"conflicting_ids": exc.conflicting_ids})
    except AssignmentError as exc:
        return error_response(str(exc), 400, title="Error updating assignment")
    except Assignment.DoesNotExist:
        return error_response("Assignment not found.", 404)
    except OverflowError:
        return error_response("The new dates are out of range.", 400, title="Error updating assignment")
    except DatabaseError as exc:
        logger.exception("Failed to resize assignment %s", assignment_id)
        return error_response(str(exc), 500, title="Error updating assignment")

    return JsonResponse(
        {
            "success": True,
            "assignment": saved.to_dict(),
            "notification": notification("Assignment updated", "The assignment has been updated successfully."),
        }
    )

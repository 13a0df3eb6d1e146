from django.urls import path

from .api import (
    assignment_detail_api,
    bed_options_api,
    bedroom_options_api,
    catalog_api,
    create_assignment_api,
    delete_assignment_api,
    drop_api,
    grid_api,
    occupants_api,
    resize_assignment_api,
    update_assignment_api,
)
from .views import (
    assignment_create_view,
    assignment_delete_view,
    assignment_edit_view,
    assignment_list_view,
    grid_view,
)


app_name = "rooms"

urlpatterns = [
    path("api/catalog/", catalog_api, name="catalog_api"),
    path("api/catalog/locations/<int:location_id>/bedrooms/", bedroom_options_api, name="bedroom_options_api"),
    path("api/catalog/bedrooms/<int:bedroom_id>/beds/", bed_options_api, name="bed_options_api"),
    path("api/grid/", grid_api, name="grid_api"),
    path("api/grid/drop/", drop_api, name="drop_api"),
    path("api/occupants/", occupants_api, name="occupants_api"),
    path("api/assignments/", create_assignment_api, name="create_assignment_api"),
    path("api/assignments/<int:assignment_id>/", assignment_detail_api, name="assignment_detail_api"),
    path(
        "api/assignments/<int:assignment_id>/update/",
        update_assignment_api,
        name="update_assignment_api",
    ),
    path(
        "api/assignments/<int:assignment_id>/delete/",
        delete_assignment_api,
        name="delete_assignment_api",
    ),
    path(
        "api/assignments/<int:assignment_id>/resize/",
        resize_assignment_api,
        name="resize_assignment_api",
    ),
    path("rooms/grid/", grid_view, name="grid"),
    path("rooms/assignments/", assignment_list_view, name="assignment_list"),
    path("rooms/assignments/new/", assignment_create_view, name="assignment_create"),
    path("rooms/assignments/<int:assignment_id>/edit/", assignment_edit_view, name="assignment_edit"),
    path("rooms/assignments/<int:assignment_id>/delete/", assignment_delete_view, name="assignment_delete"),
]

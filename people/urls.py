from django.urls import path

from .api import profile_avatar_api, team_logo_api


app_name = "people"

urlpatterns = [
    path("api/profiles/<int:profile_id>/avatar/", profile_avatar_api, name="profile_avatar_api"),
    path("api/teams/<int:team_id>/logo/", team_logo_api, name="team_logo_api"),
]

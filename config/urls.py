from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView


admin.site.site_header = "Housing Admin"
admin.site.site_title = "Housing Admin"
admin.site.index_title = "Locations, people and room assignments"


urlpatterns = [
    path("admin/", admin.site.urls),
    path("accounts/", include("allauth.urls")),
    path("", include("people.urls")),
    path("", include("rooms.urls")),
    path("", RedirectView.as_view(pattern_name="rooms:grid", permanent=False), name="home"),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

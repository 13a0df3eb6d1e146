from django import forms
from django.conf import settings
from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html

from .models import Assignment, AssignmentProfile, Bed, Bedroom, Location


class AssignmentAdminForm(forms.ModelForm):
    class Meta:
        model = Assignment
        fields = ("bed", "start_date", "end_date", "notes")

    def clean(self):
        cleaned = super().clean()
        bed = cleaned.get("bed")
        start_date = cleaned.get("start_date")
        end_date = cleaned.get("end_date")

        if settings.ROOMS_ENFORCE_BED_OVERLAP and bed and start_date and end_date:
            conflict = (
                Assignment.objects.filter(bed=bed, start_date__lte=end_date, end_date__gte=start_date)
                .exclude(pk=self.instance.pk)
                .exists()
            )
            if conflict:
                raise forms.ValidationError("This bed is already assigned for part of that date range.")
        return cleaned


class BedInline(admin.TabularInline):
    model = Bed
    extra = 0
    fields = ("name", "bed_type", "description")


class BedroomInline(admin.TabularInline):
    model = Bedroom
    extra = 0
    fields = ("name", "description")
    show_change_link = True


class AssignmentProfileInline(admin.TabularInline):
    model = AssignmentProfile
    extra = 1
    autocomplete_fields = ("profile",)


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "building", "floor", "max_occupancy", "bedroom_count", "created_at")
    list_filter = ("type",)
    search_fields = ("name", "building")
    ordering = ("name",)
    inlines = [BedroomInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_bedroom_count=Count("bedrooms"))

    @admin.display(description="Bedrooms", ordering="_bedroom_count")
    def bedroom_count(self, obj: Location) -> int:
        return obj._bedroom_count


@admin.register(Bedroom)
class BedroomAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "bed_count")
    list_filter = ("location",)
    search_fields = ("name", "location__name")
    list_select_related = ("location",)
    ordering = ("location__name", "name")
    inlines = [BedInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_bed_count=Count("beds"))

    @admin.display(description="Beds", ordering="_bed_count")
    def bed_count(self, obj: Bedroom) -> int:
        return obj._bed_count


@admin.register(Bed)
class BedAdmin(admin.ModelAdmin):
    list_display = ("name", "bed_type", "bedroom", "location_name")
    list_filter = ("bed_type", "bedroom__location")
    search_fields = ("name", "bedroom__name", "bedroom__location__name")
    list_select_related = ("bedroom__location",)
    ordering = ("bedroom__location__name", "bedroom__name", "name")

    @admin.display(description="Location", ordering="bedroom__location__name")
    def location_name(self, obj: Bed) -> str:
        return obj.bedroom.location.name


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    form = AssignmentAdminForm
    list_display = ("id", "people", "location", "bedroom", "bed", "start_date", "end_date", "overlap_badge")
    list_filter = ("location", "start_date")
    search_fields = ("profiles__full_name", "profiles__email", "bed__name", "location__name")
    ordering = ("-start_date", "id")
    readonly_fields = ("location", "bedroom", "created_at", "updated_at")
    autocomplete_fields = ("bed",)
    list_select_related = ("location", "bedroom", "bed")
    inlines = [AssignmentProfileInline]

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related("profiles")

    @admin.display(description="People")
    def people(self, obj: Assignment) -> str:
        return ", ".join(p.display_name for p in obj.profiles.all())

    @admin.display(description="Overlap")
    def overlap_badge(self, obj: Assignment) -> str:
        if not obj.overlapping().exists():
            return ""
        return format_html(
            '<span style="padding:3px 8px;border-radius:999px;'
            "background-color: rgba(239, 68, 68, 0.12);"
            "border: 1px solid rgba(239, 68, 68, 0.25);"
            "color: {};"
            'font-weight: 600; font-size: 11px;">{}</span>',
            "#b91c1c",
            "Overlaps",
        )

    def save_model(self, request, obj, form, change):
        # Bedroom and location always follow the chosen bed.
        obj.sync_hierarchy()
        obj.full_clean()
        return super().save_model(request, obj, form, change)

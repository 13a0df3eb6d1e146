from __future__ import annotations

from django import forms
from django.conf import settings
from django.db.models import Q

from people.models import Profile

from .models import Bed, Bedroom, Location
from .services import AssignmentInput


class ProfileChoiceField(forms.ModelMultipleChoiceField):
    def label_from_instance(self, obj: Profile) -> str:
        return f"{obj.display_name} ({obj.email})" if obj.email else obj.display_name


class BedChoiceField(forms.ModelChoiceField):
    def label_from_instance(self, obj: Bed) -> str:
        return f"{obj.name} ({obj.bed_type})"


class AssignmentForm(forms.Form):
    profiles = ProfileChoiceField(
        queryset=Profile.objects.none(),
        error_messages={"required": "Select at least one person."},
    )
    location = forms.ModelChoiceField(
        queryset=Location.objects.none(),
        empty_label="Select a location",
    )
    bedroom = forms.ModelChoiceField(
        queryset=Bedroom.objects.none(),
        empty_label="Select a bedroom",
    )
    bed = BedChoiceField(
        queryset=Bed.objects.none(),
        empty_label="Select a bed",
    )
    start_date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    end_date = forms.DateField(widget=forms.DateInput(attrs={"type": "date"}))
    notes = forms.CharField(
        required=False,
        widget=forms.Textarea(attrs={"rows": 3, "placeholder": "Any additional information about this assignment"}),
    )

    def __init__(self, *args, include_profile_ids=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["profiles"].queryset = (
            Profile.objects.filter(
                Q(invoices__status=settings.PEOPLE_PAID_INVOICE_STATUS) | Q(id__in=list(include_profile_ids))
            )
            .select_related("team")
            .distinct()
            .order_by("full_name", "email")
        )
        self.fields["location"].queryset = Location.objects.order_by("name")

        # Bedroom and bed choices depend on the parent picked above them, so a
        # changed location leaves a previously chosen bedroom/bed invalid.
        location_id = self._selected_id("location")
        bedroom_id = self._selected_id("bedroom")
        self.fields["bedroom"].queryset = (
            Bedroom.objects.filter(location_id=location_id).order_by("name")
            if location_id
            else Bedroom.objects.none()
        )
        self.fields["bed"].queryset = (
            Bed.objects.filter(bedroom_id=bedroom_id, bedroom__location_id=location_id).order_by("name")
            if bedroom_id and location_id
            else Bed.objects.none()
        )

    def _selected_id(self, name: str) -> int | None:
        value = self.data.get(name) if self.is_bound else None
        if not value:
            value = self.initial.get(name)
        if hasattr(value, "pk"):
            value = value.pk
        if value is None or not str(value).isdigit():
            return None
        return int(value)

    def clean(self):
        cleaned = super().clean()
        start = cleaned.get("start_date")
        end = cleaned.get("end_date")
        if start and end and start > end:
            self.add_error("end_date", "End date must be on or after the start date.")
        return cleaned

    def to_input(self) -> AssignmentInput:
        data = self.cleaned_data
        return AssignmentInput(
            bed_id=data["bed"].id,
            start_date=data["start_date"],
            end_date=data["end_date"],
            profile_ids=tuple(p.id for p in data["profiles"]),
            location_id=data["location"].id,
            bedroom_id=data["bedroom"].id,
            notes=data.get("notes") or "",
        )

from django.core.exceptions import ValidationError
from django.db import models

from people.models import Profile


class LocationType(models.TextChoices):
    APARTMENT = "Apartment", "Apartment"
    MEETING_ROOM = "Meeting Room", "Meeting Room"


class Location(models.Model):
    name = models.CharField(max_length=120)
    building = models.CharField(max_length=80, blank=True)
    floor = models.CharField(max_length=40, blank=True)
    description = models.TextField(blank=True)
    max_occupancy = models.PositiveSmallIntegerField(null=True, blank=True)
    type = models.CharField(max_length=20, choices=LocationType.choices, default=LocationType.APARTMENT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class Bedroom(models.Model):
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name="bedrooms")
    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.location} · {self.name}"


class Bed(models.Model):
    # Free-form in practice; these are the suggestions offered by the admin.
    BED_TYPE_SUGGESTIONS = ("single", "twin", "double", "queen", "king", "bunk", "sofa")

    bedroom = models.ForeignKey(Bedroom, on_delete=models.CASCADE, related_name="beds")
    name = models.CharField(max_length=120)
    bed_type = models.CharField(max_length=40, default="single")
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.bedroom} · {self.name}"


class Assignment(models.Model):
    bed = models.ForeignKey(Bed, on_delete=models.CASCADE, related_name="assignments")
    # Denormalized from the bed so the grid and list views filter without joins.
    bedroom = models.ForeignKey(Bedroom, on_delete=models.CASCADE, related_name="assignments")
    location = models.ForeignKey(Location, on_delete=models.CASCADE, related_name="assignments")
    profiles = models.ManyToManyField(Profile, through="AssignmentProfile", related_name="room_assignments")
    start_date = models.DateField()
    end_date = models.DateField()
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "room_assignments"
        ordering = ["start_date", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="room_assignment_start_lte_end",
            )
        ]
        indexes = [
            models.Index(fields=["bed", "start_date", "end_date"], name="idx_assign_bed_dates"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.bed} · {self.start_date} → {self.end_date}"

    def overlapping(self):
        """
        Other assignments on the same bed whose inclusive range intersects this one.
        """
        return (
            Assignment.objects.filter(
                bed_id=self.bed_id,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            .exclude(pk=self.pk)
        )

    def clean(self) -> None:
        super().clean()
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValidationError({"end_date": "End date must be on or after the start date."})
        if self.bed_id:
            bed = Bed.objects.select_related("bedroom").get(pk=self.bed_id)
            if self.bedroom_id and self.bedroom_id != bed.bedroom_id:
                raise ValidationError({"bed": "This bed does not belong to the selected bedroom."})
            if self.location_id and self.location_id != bed.bedroom.location_id:
                raise ValidationError({"bedroom": "This bedroom does not belong to the selected location."})

    def sync_hierarchy(self) -> None:
        """
        Fill bedroom/location from the bed.
        """
        bed = Bed.objects.select_related("bedroom").get(pk=self.bed_id)
        self.bedroom_id = bed.bedroom_id
        self.location_id = bed.bedroom.location_id


class AssignmentProfile(models.Model):
    assignment = models.ForeignKey(Assignment, on_delete=models.CASCADE, related_name="profile_links")
    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="assignment_links")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "room_assignment_profiles"
        constraints = [
            models.UniqueConstraint(
                fields=["assignment", "profile"],
                name="unique_room_assignment_profile",
            )
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.assignment_id} · {self.profile_id}"

from django.conf import settings
from django.db import models

from .colors import NO_TEAM_COLOR, team_color


class Team(models.Model):
    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True)
    logo_url = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name

    @property
    def color(self) -> str:
        """
        Display colour for grid grouping. Derived from the id, never stored.
        """
        return team_color(str(self.pk))


class ProfileRole(models.TextChoices):
    ADMIN = "admin", "Admin"
    MEMBER = "member", "Member"


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="profile",
    )
    full_name = models.CharField(max_length=160, blank=True)
    username = models.CharField(max_length=80, blank=True)
    email = models.EmailField(blank=True)
    avatar_url = models.CharField(max_length=500, blank=True)
    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="profiles",
    )
    housing_preferences = models.JSONField(null=True, blank=True)
    role = models.CharField(max_length=16, choices=ProfileRole.choices, default=ProfileRole.MEMBER)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name", "email"]

    def __str__(self) -> str:  # pragma: no cover
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email or f"Profile {self.pk}"

    @property
    def team_color(self) -> str:
        if self.team_id is None:
            return NO_TEAM_COLOR
        return team_color(str(self.team_id))


class InvoiceStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PAID = "paid", "Paid"
    OVERDUE = "overdue", "Overdue"
    CANCELLED = "cancelled", "Cancelled"


class Invoice(models.Model):
    profile = models.ForeignKey(
        Profile,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="invoices",
    )
    email = models.EmailField()
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80)
    room_type = models.CharField(max_length=80)
    checkin = models.DateField()
    checkout = models.DateField()
    price = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=16, choices=InvoiceStatus.choices, default=InvoiceStatus.PENDING)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "profile"], name="idx_invoice_status_profile"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.first_name} {self.last_name} · {self.room_type} · {self.get_status_display()}"

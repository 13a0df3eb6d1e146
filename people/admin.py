from django.conf import settings
from django.contrib import admin
from django.db.models import Count
from django.utils.html import format_html

from .models import Invoice, Profile, Team


def _swatch(color: str) -> str:
    return format_html(
        '<span style="display:inline-block;width:12px;height:12px;border-radius:999px;'
        'background-color:{};margin-right:6px;vertical-align:middle;"></span>{}',
        color,
        color,
    )


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ("name", "color_swatch", "member_count", "created_at")
    search_fields = ("name",)
    ordering = ("name",)

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_member_count=Count("profiles"))

    @admin.display(description="Color")
    def color_swatch(self, obj: Team) -> str:
        return _swatch(obj.color)

    @admin.display(description="Members", ordering="_member_count")
    def member_count(self, obj: Team) -> int:
        return obj._member_count


class InvoiceInline(admin.TabularInline):
    model = Invoice
    extra = 0
    fields = ("room_type", "checkin", "checkout", "price", "status", "paid_at")
    show_change_link = True


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("display_name", "email", "team", "role", "has_paid_invoice")
    list_filter = ("role", "team")
    search_fields = ("full_name", "username", "email")
    autocomplete_fields = ("user", "team")
    list_select_related = ("team",)
    inlines = [InvoiceInline]

    @admin.display(description="Paid", boolean=True)
    def has_paid_invoice(self, obj: Profile) -> bool:
        return obj.invoices.filter(status=settings.PEOPLE_PAID_INVOICE_STATUS).exists()


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("id", "email", "room_type", "checkin", "checkout", "price", "status")
    list_filter = ("status", "room_type")
    search_fields = ("email", "first_name", "last_name")
    autocomplete_fields = ("profile",)
    list_select_related = ("profile",)
    ordering = ("-created_at",)

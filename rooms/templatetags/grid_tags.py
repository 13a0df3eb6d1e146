from django import template
from django.conf import settings


register = template.Library()


@register.filter
def add_class(bound_field, css_class: str):
    """
    Render a BoundField widget with CSS classes appended.
    Usage: {{ form.bed|add_class:"form-control" }}
    """
    existing = bound_field.field.widget.attrs.get("class", "")
    combined = f"{existing} {css_class}".strip()
    return bound_field.as_widget(attrs={"class": combined})


@register.filter
def block_width(cell) -> int:
    """
    Pixel width of a grid block spanning ``cell.span`` day columns.
    """
    return cell.span * settings.ROOMS_PIXELS_PER_DAY


@register.simple_tag
def window_query(window) -> str:
    return f"start={window.start.isoformat()}&days={window.days}"


@register.filter
def selected_for(selected_filters, key: str) -> list:
    """
    Values selected for one preference category: {{ selected_filters|selected_for:"sleepSchedule" }}.
    """
    return selected_filters.get(key, []) if selected_filters else []


@register.simple_tag
def pixels_per_day() -> int:
    return settings.ROOMS_PIXELS_PER_DAY

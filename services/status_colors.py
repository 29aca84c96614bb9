"""
Status and material colour derivation for order cards.
"""

from typing import Iterable, Optional

from config.calendar import (
    BORDER_COLORS,
    CABINET_ORDER_PREFIX,
    CARD_PRODUCTION_STAGES,
    DEFAULT_CARD_MATERIAL,
    ISSUED_STATUS,
    MATERIAL_COLORS,
    MATERIAL_DEFAULT_COLOR,
    NOT_PAID_STATUS,
    PRODUCTION_STAGE_LETTERS,
    READY_STATUS,
    STAGE_READY_COLOR,
    STATUS_COLORS,
)
from models.calendar import CalendarOrder, DetailSummary


def _normalize(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def get_status_color(status: Optional[str]) -> str:
    """Card background by order status."""
    status = _normalize(status)

    if status == ISSUED_STATUS:
        return STATUS_COLORS["issued"]
    if status == READY_STATUS:
        return STATUS_COLORS["ready"]
    if "работ" in status:
        return STATUS_COLORS["in_progress"]
    if "отмен" in status:
        return STATUS_COLORS["cancelled"]
    return STATUS_COLORS["default"]


def get_material_color(material: Optional[str]) -> str:
    """Material badge colour; thickness markers win over material kind."""
    material = _normalize(material)
    for marker, color in MATERIAL_COLORS:
        if marker in material:
            return color
    return MATERIAL_DEFAULT_COLOR


def get_production_stage_style(status: Optional[str], background_color: str = "#ffffff") -> dict:
    """
    Stage indicator style. Stages not yet done take the background
    colour so they are invisible on the card.
    """
    if _normalize(status) == READY_STATUS:
        return {"color": STAGE_READY_COLOR, "font_weight": 700}
    return {"color": background_color, "font_weight": 600}


def get_card_border_color(order: CalendarOrder) -> str:
    status = _normalize(order.order_status_name)
    payment = _normalize(order.payment_status_name)

    if status == ISSUED_STATUS:
        return BORDER_COLORS["issued"]
    if status == READY_STATUS:
        return BORDER_COLORS["ready"]
    if NOT_PAID_STATUS in payment:
        return BORDER_COLORS["not_paid"]
    if (order.order_name or "").startswith(CABINET_ORDER_PREFIX):
        return BORDER_COLORS["cabinet"]
    return BORDER_COLORS["default"]


def get_order_number_color(order: CalendarOrder) -> str:
    """Cabinet orders are brown, everything else blue."""
    if (order.order_name or "").startswith(CABINET_ORDER_PREFIX):
        return "#8B4513"
    return "#1976d2"


def get_milling_display_value(order_details: Optional[Iterable[DetailSummary]]) -> str:
    """
    Summarize milling across details.

    Rules:
        - "Выборка" if any detail's milling contains "выборка"
        - "Фрезеровка" if any detail has milling other than "модерн"
        - "Модерн" if every detail is "модерн"
        - "" when no detail has milling
    """
    milling_types = [
        d.milling_type_name.lower()
        for d in (order_details or [])
        if d.milling_type_name
    ]

    if not milling_types:
        return ""

    if any("выборка" in t for t in milling_types):
        return "Выборка"

    if any("модерн" not in t for t in milling_types):
        return "Фрезеровка"

    return "Модерн"


def shorten_material_name(name: str) -> str:
    """"МДФ 18мм" → "МДФ18"."""
    short = name.replace("мм", "").replace("MM", "").replace("mm", "")
    return "".join(short.split())


def get_materials_for_card(
    order_details: Optional[Iterable[DetailSummary]],
    exclude_default: bool = False
) -> list[str]:
    """
    Distinct material names of an order's details, in first-seen order.

    With `exclude_default` the workshop default material is hidden.
    """
    seen: list[str] = []
    for detail in order_details or []:
        name = (detail.material_name or "").strip()
        if not name:
            continue
        if exclude_default and _normalize(name).replace("мм", "").strip() == DEFAULT_CARD_MATERIAL:
            continue
        short = shorten_material_name(name)
        if short not in seen:
            seen.append(short)
    return seen


def get_card_production_stages(order: CalendarOrder) -> list[str]:
    """Card stage letters (П Р З У) matched from the production keywords."""
    text = " ".join(
        part for part in (
            _normalize(order.production_status_name),
            order.production_status_search,
        ) if part
    )
    return [letter for letter, _label, match in CARD_PRODUCTION_STAGES if match in text]


def format_production_stages(passed_codes: Iterable[str], separator: str = "/") -> str:
    """
    Letters of passed stage codes in display order, e.g. "Н/О/Р".

    Unknown codes are ignored.
    """
    passed = set(passed_codes)
    return separator.join(
        letter for code, letter in PRODUCTION_STAGE_LETTERS.items() if code in passed
    )


def are_all_production_stages_ready(order: CalendarOrder) -> bool:
    """True when every display stage code has been passed."""
    passed = set(order.passed_stage_codes)
    return bool(passed) and all(code in passed for code in PRODUCTION_STAGE_LETTERS)

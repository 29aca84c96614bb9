"""
Production calendar configuration.

Layout constants, card zoom range, status names and display colours
used by the scheduling board.
"""

# =============================================================================
# LAYOUT CONSTANTS (pixels)
# =============================================================================

LAYOUT_CONFIG = {
    # Narrow (mobile) columns stretch between these widths
    "MOBILE_MIN_COLUMN_WIDTH": 160,
    "MOBILE_MAX_COLUMN_WIDTH": 200,

    # Wide viewports keep a fixed column; cards are scaled visually instead
    "DESKTOP_COLUMN_WIDTH": 252,

    # Gap between columns
    "COLUMN_GAP": 16,

    # Container padding, left + right
    "CONTAINER_PADDING": 32,

    # Widths at or below this are treated as narrow viewports
    "MOBILE_BREAKPOINT": 768,
}

# Narrow viewports always show between 2 and 3 columns
MOBILE_MIN_COLUMNS = 2
MOBILE_MAX_COLUMNS = 3

# Width assumed before the first resize event arrives
DEFAULT_CONTAINER_WIDTH = 1200


# =============================================================================
# CARD SCALE (zoom)
# =============================================================================

CARD_SCALE_MIN = 0.7
CARD_SCALE_MAX = 1.5
CARD_SCALE_STEP = 0.1
CARD_SCALE_DEFAULT = 1.0


# =============================================================================
# RESOURCES
# =============================================================================

ORDERS_RESOURCE = "orders"
ORDERS_VIEW_RESOURCE = "orders_view"
ORDER_DETAILS_RESOURCE = "order_details"
MILLING_TYPES_RESOURCE = "milling_types"
MATERIALS_RESOURCE = "materials"
ORDER_STATUSES_RESOURCE = "order_statuses"
PAYMENT_STATUSES_RESOURCE = "payment_statuses"
PRODUCTION_STATUSES_RESOURCE = "production_statuses"
PRODUCTION_STATUS_EVENTS_RESOURCE = "production_status_events"
DOWELING_LINKS_RESOURCE = "order_doweling_links"
DOWELING_ORDERS_RESOURCE = "doweling_orders"

# Primary key column per resource (PostgREST tables use descriptive ids)
ID_COLUMNS = {
    ORDERS_RESOURCE: "order_id",
    ORDERS_VIEW_RESOURCE: "order_id",
    ORDER_DETAILS_RESOURCE: "detail_id",
    MILLING_TYPES_RESOURCE: "milling_type_id",
    MATERIALS_RESOURCE: "material_id",
    ORDER_STATUSES_RESOURCE: "order_status_id",
    PAYMENT_STATUSES_RESOURCE: "payment_status_id",
    PRODUCTION_STATUSES_RESOURCE: "production_status_id",
    PRODUCTION_STATUS_EVENTS_RESOURCE: "event_id",
    DOWELING_LINKS_RESOURCE: "link_id",
    DOWELING_ORDERS_RESOURCE: "doweling_order_id",
}

SCHEDULE_FIELD = "planned_completion_date"


# =============================================================================
# STATUS NAMES
# =============================================================================

ISSUED_STATUS = "выдан"
READY_STATUS = "готов"
READY_TO_ISSUE_STATUS = "готов к выдаче"
DRAWN_STATUS = "отрисован"
NOT_PAID_STATUS = "не оплачен"

# Orders whose name starts with this letter are cabinet ("корпусные") orders
CABINET_ORDER_PREFIX = "К"

# Logical status field → physical column on the orders table
STATUS_FIELD_MAPPING = {
    "order_status": "order_status_id",
    "payment_status": "payment_status_id",
    "production_status": "production_status_id",
}

STATUS_FIELD_LABELS = {
    "order_status": "Статус заказа",
    "payment_status": "Статус оплаты",
    "production_status": "Статус производства",
}

# Manual production status disables the status derived from details
PRODUCTION_STATUS_AUTO_FIELD = "production_status_from_details_enabled"


# =============================================================================
# PRODUCTION STAGES
# =============================================================================

# Display order of production stage codes with their card letters
PRODUCTION_STAGE_LETTERS = {
    "new": "Н",
    "drawn": "О",
    "film_purchase": "П",
    "cut": "Р",
    "drilled": "С",
    "sanded": "Ш",
    "stocked": "К",
    "laminated": "З",
    "packed": "У",
    "issued": "В",
}

PRODUCTION_STAGE_NAMES = {
    "new": "Новый",
    "drawn": "Отрисован",
    "film_purchase": "Закуп пленки",
    "cut": "Распилен",
    "drilled": "Присажен",
    "sanded": "Отшлифован",
    "stocked": "Закромлен",
    "laminated": "Закатан",
    "packed": "Упакован",
    "issued": "Выдан",
}

# Stages shown on the standard card, matched against the production keyword text
CARD_PRODUCTION_STAGES = [
    ("П", "Закуп пленки", "закуп"),
    ("Р", "Распилен", "распил"),
    ("З", "Закатан", "закат"),
    ("У", "Упакован", "упаков"),
]


# =============================================================================
# DISPLAY COLOURS
# =============================================================================

STATUS_COLORS = {
    "issued": "#eafbe7",
    "ready": "#ffd9bf",
    "in_progress": "#fff9e6",
    "cancelled": "#ffe6e6",
    "default": "#ffffff",
}

BORDER_COLORS = {
    "issued": "#52c41a",
    "ready": "#ff6f00",
    "not_paid": "#ff4d4f",
    "cabinet": "#8B4513",
    "default": "#d9d9d9",
}

# Checked in order; first substring match wins
MATERIAL_COLORS = [
    ("18", "#fff3cd"),
    ("16", "#ffeaa7"),
    ("10", "#90caf9"),
    ("8", "#c8e6c9"),
    ("лдсп", "#ce93d8"),
    ("мдф", "#ffcc80"),
    ("фанера", "#d7ccc8"),
]
MATERIAL_DEFAULT_COLOR = "#f0f0f0"

STAGE_READY_COLOR = "#ff6f00"

# Materials hidden from compact card badges (the workshop default)
DEFAULT_CARD_MATERIAL = "мдф 16"

"""
Workbook palette: the dashboard's indigo theme plus per-column-type number formats.
"""
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

INDIGO = "6366F1"
DARK_INDIGO = "3730A3"
LIGHT_INDIGO = "EEF2FF"
STRIPE = "F5F5F5"
TOTAL_BLUE = "E3F2FD"
TOP_GOLD = "FFF8DC"
MUTED = "666666"


def _font(size: int, color: str = "000000", **kw) -> Font:
    return Font(name="Calibri", size=size, color=color, **kw)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _box(color: str, edge: str = "thin", top: str = "thin", bottom: str = "thin") -> Border:
    return Border(
        left=Side(style=edge, color=color),
        right=Side(style=edge, color=color),
        top=Side(style=top, color=color),
        bottom=Side(style=bottom, color=color),
    )


TITLE_FONT = _font(24, DARK_INDIGO, bold=True)
SUBTITLE_FONT = _font(12, MUTED, italic=True)
SECTION_FONT = _font(14, DARK_INDIGO, bold=True)
HEADER_FONT = _font(11, "FFFFFF", bold=True)
DATA_FONT = _font(10)
TOTAL_FONT = _font(10, bold=True)
KPI_VALUE_FONT = _font(28, DARK_INDIGO, bold=True)
KPI_LABEL_FONT = _font(10, MUTED)
INSIGHT_FONT = _font(10, italic=True)

HEADER_FILL = _fill(INDIGO)
STRIPE_FILL = _fill(STRIPE)
TOTAL_FILL = _fill(TOTAL_BLUE)

# highlight_fn return value -> fill
HIGHLIGHT_FILLS = {
    "gold": _fill(TOP_GOLD),
    "light": _fill(LIGHT_INDIGO),
}

CELL_BORDER = _box("CCCCCC")
HEADER_BORDER = _box(DARK_INDIGO, bottom="medium")
TOTAL_BORDER = _box("999999", top="medium", bottom="medium")

CENTER = Alignment(horizontal="center", vertical="center")
LEFT = Alignment(horizontal="left", vertical="center")
RIGHT = Alignment(horizontal="right", vertical="center")

# Column types written by the coin report; anything else is plain left-aligned text.
NUMBER_FORMATS = {
    "coins": "#,##0.##",
    "number": "#,##0",
    "percent": '0.0"%"',
    "decimal": "0.00",
}

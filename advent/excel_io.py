"""
Excel I/O for the advent calendar.

Reads the participant list from a workbook and writes a generated month
(assignments, per-participant summary, flags) to a new one.
"""

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side

from advent.jokers import JOKER_LABELS, JokerType, WEEK_JOKERS, is_weekend


# ═══════════════════════════════════════════════════════════════════════════
# HELPERS
# ═══════════════════════════════════════════════════════════════════════════

def _cell_str(val):
    """Get string from a cell value, handling None."""
    if val is None:
        return ""
    return str(val).strip()


def _read_sheet_as_dicts(ws):
    """Read a worksheet into a list of dicts using row 1 as headers."""
    rows = list(ws.iter_rows(min_row=1, values_only=True))
    if not rows:
        return []
    headers = [_cell_str(h).lower() for h in rows[0]]
    result = []
    for row in rows[1:]:
        if all(v is None for v in row):
            continue
        d = {}
        for i, h in enumerate(headers):
            if h and i < len(row):
                d[h] = row[i]
        result.append(d)
    return result


def _col_letter(n):
    """1-based column index to letter(s)."""
    s = ""
    while n > 0:
        n, r = divmod(n - 1, 26)
        s = chr(65 + r) + s
    return s


# ═══════════════════════════════════════════════════════════════════════════
# READERS
# ═══════════════════════════════════════════════════════════════════════════

def load_participants_from_excel(wb, sheet_name="Participants"):
    """Load participants from a sheet with 'id' and 'name' columns.

    'email' is carried through when present. Rows without an id are skipped.

    Returns:
        list of {id, name[, email]} in sheet order
    """
    if sheet_name not in wb.sheetnames:
        raise ValueError(f"Workbook has no '{sheet_name}' sheet")

    participants = []
    for row in _read_sheet_as_dicts(wb[sheet_name]):
        pid = _cell_str(row.get("id"))
        if not pid:
            continue
        p = {"id": pid, "name": _cell_str(row.get("name")) or pid}
        email = _cell_str(row.get("email"))
        if email:
            p["email"] = email
        participants.append(p)
    return participants


def load_participants_file(path, sheet_name="Participants"):
    wb = load_workbook(path, data_only=True)
    return load_participants_from_excel(wb, sheet_name)


# ═══════════════════════════════════════════════════════════════════════════
# WRITERS
# ═══════════════════════════════════════════════════════════════════════════

# Styles
_HEADER_FONT = Font(bold=True, size=11, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
_THIN_BORDER = Border(
    left=Side(style='thin', color='D9D9D9'),
    right=Side(style='thin', color='D9D9D9'),
    top=Side(style='thin', color='D9D9D9'),
    bottom=Side(style='thin', color='D9D9D9'),
)
_WRAP = Alignment(wrap_text=True, vertical='top')
_RED_FONT = Font(color="9C0006", size=10)
_ISSUE_FILL = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")

_JOKER_FILLS = {
    JokerType.VOL:         PatternFill(start_color="F8D7DA", end_color="F8D7DA", fill_type="solid"),
    JokerType.PARTAGE:     PatternFill(start_color="FFF3CD", end_color="FFF3CD", fill_type="solid"),
    JokerType.GENTILLESSE: PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid"),
    JokerType.MYSTERE:     PatternFill(start_color="CFE2FF", end_color="CFE2FF", fill_type="solid"),
    JokerType.COMMUN:      PatternFill(start_color="BDD7EE", end_color="BDD7EE", fill_type="solid"),
}

_ASSIGNMENT_COLUMNS = [
    ("Date", 12),
    ("Day", 6),
    ("Giver", 22),
    ("Receiver", 22),
    ("Joker", 24),
]

_FLAG_COLUMNS = [
    ("Date", 12),
    ("Participant", 22),
    ("Flag", 18),
    ("Message", 60),
]


def _write_header_row(ws, columns):
    for ci, (label, width) in enumerate(columns, 1):
        c = ws.cell(row=1, column=ci, value=label)
        c.font = _HEADER_FONT
        c.fill = _HEADER_FILL
        c.alignment = Alignment(horizontal='center', wrap_text=True)
        c.border = _THIN_BORDER
        ws.column_dimensions[_col_letter(ci)].width = width


def _replace_sheet(wb, sheet_name):
    if sheet_name in wb.sheetnames:
        del wb[sheet_name]
    return wb.create_sheet(sheet_name)


def write_assignments_sheet(wb, records, participants):
    """Write (or overwrite) the 'Assignments' sheet, one row per record."""
    names = {p["id"]: p.get("name") or p["id"] for p in participants}
    ws = _replace_sheet(wb, "Assignments")
    _write_header_row(ws, _ASSIGNMENT_COLUMNS)

    for ri, a in enumerate(records, 2):
        joker = a["joker"]
        vals = [
            a["date"].isoformat(),
            a["date"].strftime("%a"),
            names.get(a["giver_id"], a["giver_id"]),
            names.get(a["receiver_id"], a["receiver_id"]),
            JOKER_LABELS[joker] if joker is not None else "",
        ]
        for ci, val in enumerate(vals, 1):
            c = ws.cell(row=ri, column=ci, value=val)
            c.border = _THIN_BORDER
        if joker is not None:
            ws.cell(row=ri, column=5).fill = _JOKER_FILLS[joker]
        if is_weekend(a["date"]):
            ws.cell(row=ri, column=2).font = _RED_FONT

    ws.freeze_panes = 'A2'
    ws.auto_filter.ref = f"A1:{_col_letter(len(_ASSIGNMENT_COLUMNS))}{len(records) + 1}"
    return ws


def write_summary_sheet(wb, participant_stats):
    """Write (or overwrite) the 'Summary' sheet, one row per participant."""
    ws = _replace_sheet(wb, "Summary")
    columns = [("Participant", 22), ("Days", 7), ("Jokers received", 10)]
    columns += [(joker.value, 13) for joker in WEEK_JOKERS]
    columns += [("Repeats", 9)]
    _write_header_row(ws, columns)

    for ri, pid in enumerate(sorted(participant_stats), 2):
        s = participant_stats[pid]
        vals = [s["name"], s["days_given"], s["total_jokers_received"]]
        vals += [s["jokers_received"].get(joker.value, 0) for joker in WEEK_JOKERS]
        vals += [s["repeat_pairs"]]
        for ci, val in enumerate(vals, 1):
            c = ws.cell(row=ri, column=ci, value=val)
            c.border = _THIN_BORDER
        if s["kindness_received"] == 0:
            kindness_col = 4 + WEEK_JOKERS.index(JokerType.GENTILLESSE)
            ws.cell(row=ri, column=kindness_col).fill = _ISSUE_FILL
        if s["total_jokers_received"] == 0:
            ws.cell(row=ri, column=3).fill = _ISSUE_FILL

    ws.freeze_panes = 'A2'
    return ws


def write_flags_sheet(wb, flags):
    """Write (or overwrite) the 'Flags' sheet."""
    ws = _replace_sheet(wb, "Flags")
    _write_header_row(ws, _FLAG_COLUMNS)

    for ri, f in enumerate(flags, 2):
        vals = [f["date"], f["participant"], f["flag_type"], f["message"]]
        for ci, val in enumerate(vals, 1):
            c = ws.cell(row=ri, column=ci, value=val)
            c.border = _THIN_BORDER
            c.alignment = _WRAP

    ws.freeze_panes = 'A2'
    return ws


def save_month_workbook(path, records, participants, participant_stats, flags):
    """Build a fresh workbook with all three sheets and save it to path."""
    wb = Workbook()
    del wb[wb.active.title]
    write_assignments_sheet(wb, records, participants)
    write_summary_sheet(wb, participant_stats)
    write_flags_sheet(wb, flags)
    wb.save(path)
    return path

import datetime as dt
from pathlib import Path
import pandas as pd
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from reportlab.lib.units import mm

from termplan.core.config import settings

PROJECTION_COLUMNS = [
    "year_month",
    "revenue",
    "target",
    "confirmed_revenue",
    "potential_revenue",
    "flow_revenue",
    "stock_revenue",
    "labor_cost",
    "paid_cost",
    "sga",
    "tax_repayment",
    "investment",
    "cash_in",
    "financial_in",
    "total_cash_in",
    "total_cash_out",
    "cash_balance_change",
    "cash_balance",
]


def export_projections_xlsx(rows: list[dict], out_path: Path) -> Path:
    df = pd.DataFrame(rows)
    df["year_month"] = df["year_month"].astype(str)
    df = df[PROJECTION_COLUMNS]
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="xlsxwriter") as w:
        df.to_excel(w, index=False, sheet_name="projections")
        sheet = w.sheets["projections"]
        sheet.set_column(0, 0, 10)
        sheet.set_column(1, len(PROJECTION_COLUMNS) - 1, 16)
    return out_path


def export_metrics_pdf(metrics: dict, out_path: Path) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    c = canvas.Canvas(str(out_path), pagesize=A4)
    width, height = A4
    y = height - 20*mm
    c.setFont("Helvetica-Bold", 14)
    c.drawString(20*mm, y, f"Project profitability - term {metrics['term']}")
    y -= 8*mm
    c.setFont("Helvetica", 10)
    c.drawString(20*mm, y, f"Target margin: {metrics['target_margin_min']:.0f}% - {metrics['target_margin_max']:.0f}%")
    y -= 10*mm

    c.setFont("Helvetica-Bold", 9)
    cols = [20*mm, 80*mm, 110*mm, 140*mm, 165*mm]
    for x, title in zip(cols, ["Project", "Revenue", "Cost", "Profit", "Margin"]):
        c.drawString(x, y, title)
    y -= 6*mm
    c.setFont("Helvetica", 9)
    for r in metrics["rows"]:
        if y < 20*mm:
            c.showPage()
            c.setFont("Helvetica", 9)
            y = height - 20*mm
        name = (r["project_name"] or r["client_name"])[:32]
        values = [name, f"{r['total_revenue']:,}", f"{r['total_cost']:,}", f"{r['profit']:,}", f"{r['profit_margin']:.1f} %"]
        for x, v in zip(cols, values):
            c.drawString(x, y, v)
        y -= 6*mm
    c.showPage()
    c.save()
    return out_path


def default_export_path(prefix: str, ext: str) -> Path:
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
    return Path(settings.EXPORT_DIR) / f"{prefix}_{ts}.{ext}"

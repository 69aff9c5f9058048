from __future__ import annotations

import csv
import logging
from io import BytesIO, StringIO
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from questions import AXES, FACTOR_AXES, Question, likert_label
from scoring import ProfileResult

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
FONT_DIR = BASE_DIR / "fonts"
PDF_FONT_FAMILY = "NotoSansJP"
PDF_FONT_REGULAR_PATH = FONT_DIR / "NotoSansJP-Regular.ttf"
PDF_FONT_BOLD_PATH = FONT_DIR / "NotoSansJP-Bold.ttf"

CSV_FILENAME = "factor_personality_results.csv"
CSV_ANSWER_HEADER = ["#", "Axis", "Question", "Answer(Label)"]
CSV_FACTOR_HEADER = ["Factor", "Percent(%)", "Base Style Score (0-10)", "MBTI-Blended Score (0-10)"]


class ReportExportError(RuntimeError):
    """The report could not be produced; computed scores are unaffected."""


def format_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def build_csv_rows(
    questions: Iterable[Question],
    answers: Mapping[str, int],
    result: ProfileResult,
) -> List[List[str]]:
    rows: List[List[str]] = [list(CSV_ANSWER_HEADER)]
    for index, question in enumerate(questions, start=1):
        rows.append([str(index), question.axis, question.text, likert_label(answers.get(question.id))])
    rows.append([])
    rows.append(["MBTI Type", result.type_code])
    rows.append([])
    rows.append(list(CSV_FACTOR_HEADER))
    for factor in FACTOR_AXES:
        rows.append(
            [
                factor,
                format_number(result.factor_mix[factor]),
                format_number(result.base_scores[factor]),
                format_number(result.blended_scores[factor]),
            ]
        )
    return rows


def generate_csv_report(
    questions: Iterable[Question],
    answers: Mapping[str, int],
    result: ProfileResult,
) -> BytesIO:
    rows = build_csv_rows(questions, answers, result)
    text = StringIO()
    try:
        writer = csv.writer(text, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerows(rows)
    except csv.Error as exc:
        raise ReportExportError(f"CSV export failed: {exc}") from exc

    buffer = BytesIO(text.getvalue().encode("utf-8"))
    buffer.seek(0)
    return buffer


def unicode_font_available() -> bool:
    return PDF_FONT_REGULAR_PATH.exists()


def sanitize_for_pdf(text: str) -> str:
    replacements = {
        "’": "'",
        "‘": "'",
        "“": '"',
        "”": '"',
        "–": "-",
        "—": "-",
        "‑": "-",
        "…": "...",
        "·": "-",
        "×": "x",
    }
    for src, dest in replacements.items():
        text = text.replace(src, dest)
    return text


def generate_pdf_report(
    questions: Iterable[Question],
    answers: Mapping[str, int],
    result: ProfileResult,
    breakdown,
    pdf_text: Dict[str, str],
    blend: bool = True,
) -> BytesIO:
    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    base_text_color = (32, 37, 45)
    muted_color = (110, 116, 132)

    regular_family = "Helvetica"
    regular_style = ""
    bold_family = "Helvetica"
    bold_style = "B"
    try:
        if PDF_FONT_REGULAR_PATH.exists():
            pdf.add_font(PDF_FONT_FAMILY, "", str(PDF_FONT_REGULAR_PATH))
            regular_family = PDF_FONT_FAMILY
            bold_family = PDF_FONT_FAMILY
            bold_style = ""
        if PDF_FONT_BOLD_PATH.exists():
            pdf.add_font(PDF_FONT_FAMILY, "B", str(PDF_FONT_BOLD_PATH))
            bold_style = "B"
    except (RuntimeError, FPDFException):
        logger.warning("Falling back to Helvetica; could not load %s", FONT_DIR)
        regular_family = "Helvetica"
        bold_family = "Helvetica"
        bold_style = "B"

    try:
        pdf.set_title(pdf_text["title"])
        pdf.set_author("Factor-Personality Profiler")
        pdf.set_text_color(*base_text_color)

        pdf.set_font(bold_family, bold_style, 16)
        pdf.cell(0, 10, sanitize_for_pdf(pdf_text["title"]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(2)

        pdf.set_font(regular_family, regular_style, 12)
        pdf.cell(
            0,
            8,
            sanitize_for_pdf(f"{pdf_text['type_code']}: {result.type_code}"),
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
        pdf.ln(4)

        pdf.set_font(bold_family, bold_style, 14)
        pdf.cell(0, 8, sanitize_for_pdf(pdf_text["axis_breakdown"]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(regular_family, regular_style, 11)
        for axis in breakdown:
            axis_text = pdf_text["axis_line"].format(
                axis=axis["axis_key"],
                title=axis["title"],
                selected=axis["selected"],
                strength=axis.get("strength_label", axis["strength"]),
                margin=format_number(axis["margin"]),
            )
            pdf.multi_cell(0, 6, sanitize_for_pdf(axis_text), align="L", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

        scores = result.factor_scores(blend)
        pdf.set_font(bold_family, bold_style, 14)
        heading = pdf_text["factor_scores_blended"] if blend else pdf_text["factor_scores"]
        pdf.cell(0, 8, sanitize_for_pdf(heading), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(regular_family, regular_style, 11)
        for factor in FACTOR_AXES:
            factor_text = pdf_text["factor_line"].format(
                factor=AXES[factor].label,
                pct=format_number(result.factor_mix[factor]),
                score=format_number(scores[factor]),
            )
            pdf.multi_cell(0, 6, sanitize_for_pdf(factor_text), align="L", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(4)

        pdf.set_font(bold_family, bold_style, 14)
        pdf.cell(0, 8, sanitize_for_pdf(pdf_text["answer_summary"]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        for index, question in enumerate(questions, start=1):
            pdf.set_font(regular_family, regular_style, 11)
            pdf.set_text_color(*base_text_color)
            pdf.multi_cell(
                0,
                6,
                sanitize_for_pdf(f"{index}. [{question.axis}] {question.text}"),
                align="L",
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )
            pdf.set_text_color(*muted_color)
            label = likert_label(answers.get(question.id)) or "-"
            pdf.cell(0, 5, sanitize_for_pdf(f"    {label}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(1)

        buffer = BytesIO()
        pdf.output(buffer)
    except FPDFException as exc:
        raise ReportExportError(f"PDF export failed: {exc}") from exc

    buffer.seek(0)
    return buffer

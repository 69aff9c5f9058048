from __future__ import annotations

import logging
import os
import random
from typing import Dict, List

from dotenv import load_dotenv
from flask import Flask, g, redirect, render_template, request, send_file, url_for

from questions import (
    AXES,
    DEFAULT_LANGUAGE,
    DEFAULT_QUESTION_LIMIT,
    FACTOR_AXES,
    LANGUAGES,
    LIKERT_OPTIONS,
    axis_description,
    question_text,
    resolve_language,
    select_questions,
)
from report import (
    CSV_FILENAME,
    ReportExportError,
    generate_csv_report,
    generate_pdf_report,
    unicode_font_available,
)
from scoring import (
    AnswerValidationError,
    axis_breakdown,
    parse_answers,
    progress,
    radar_upper_limit,
    score_profile,
)

load_dotenv()

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["SECRET_KEY"] = os.getenv("SECRET_KEY", "replace-this-with-a-random-value")
app.config["QUIZ_QUESTION_LIMIT"] = int(os.getenv("QUIZ_QUESTION_LIMIT", DEFAULT_QUESTION_LIMIT))
app.config["QUIZ_SEED"] = int(os.environ["QUIZ_SEED"]) if os.getenv("QUIZ_SEED") else None

COPY: Dict[str, Dict[str, Dict[str, str] | str]] = {
    "en": {
        "site": {
            "title": "Factor-Personality Profiler",
            "tagline": "MBTI-style × MSCI Factor analogies",
            "footer": "Disclaimer: For fun/learning. Inspired by MBTI-style dimensions and factor concepts (e.g., Quality, Momentum); not a clinical or investment tool.",
        },
        "quiz": {
            "hero_title": "Discover your personality-factor mix",
            "hero_description": "Four MBTI-style axes (E–I, S–N, T–F, J–P) plus an overlay of eight factor analogies (Quality, Momentum, Value, Growth, Low Volatility, Size, Yield, Liquidity).",
            "statements": "{count} statements, 5-point scale",
            "instant": "Instant results with charts + optional MBTI blend",
            "language_label": "Language (quiz only):",
            "scale_hint": "Scale: Strongly Disagree · Disagree · Neutral · Agree · Strongly Agree",
            "submit_button": "See My Results",
        },
        "result": {
            "type_heading": "Your MBTI-style type:",
            "margins_lede": "Per-axis margins indicate how strongly you lean toward each side.",
            "margin_chart": "Axis margin (E/S/T/J positive)",
            "preference": "preference",
            "margin_label": "margin",
            "scores_heading": "Style Exposure Scores",
            "scores_heading_blended": "MBTI-Blended Style Exposure Scores",
            "scores_lede": "Scores are 0–10. These are from responses only (no MBTI overlay).",
            "scores_lede_blended": "Scores are 0–10. Includes a heuristic MBTI overlay based on axis strengths.",
            "mix_heading": "Factor mix",
            "blend_on": "Blend MBTI into Styles",
            "blend_off": "Show responses only",
            "retake": "Retake",
            "download_csv": "Download CSV",
            "download_pdf": "Download PDF",
            "progress": "Progress: {answered}/{total} ({percent}%)",
        },
        "strength": {
            "very strong": "very strong",
            "strong": "strong",
            "moderate": "moderate",
            "slight": "slight",
        },
        "errors": {
            "missing_questions": "Please answer every statement before submitting. Missing: {missing}",
            "invalid_answer": "Invalid answer for {question}: {reason}",
            "incomplete_export": "Unable to export because answers are incomplete.",
            "export_failed": "The report could not be created. Your results are unchanged; please try again.",
        },
        "pdf": {
            "title": "Factor-Personality Report",
            "type_code": "MBTI Type",
            "axis_breakdown": "Axis Breakdown",
            "axis_line": "{axis} ({title}): {selected} · {strength} (margin {margin})",
            "factor_scores": "Style Exposure Scores",
            "factor_scores_blended": "MBTI-Blended Style Exposure Scores",
            "factor_line": "{factor}: {score} / 10 · {pct}%",
            "answer_summary": "Answer Summary",
        },
    },
    "ja": {
        "site": {
            "title": "ファクター性格プロファイラー",
            "tagline": "MBTI風 × MSCIファクターの類推",
            "footer": "免責事項：学習・娯楽目的です。臨床・投資判断のためのツールではありません。",
        },
        "quiz": {
            "hero_title": "あなたの性格ファクター構成を見つけよう",
            "hero_description": "MBTI風の4軸（E–I, S–N, T–F, J–P）に、8つのファクター（クオリティ、モメンタム、バリュー、グロース、低ボラティリティ、サイズ、利回り、流動性）を重ねます。",
            "statements": "全{count}問・5段階評価",
            "instant": "チャートとMBTIブレンドで結果をすぐ表示",
            "language_label": "言語（設問のみ）：",
            "scale_hint": "尺度： 全くそう思わない · あまりそう思わない · どちらとも言えない · そう思う · とてもそう思う",
            "submit_button": "結果を見る",
        },
        "result": {
            "type_heading": "あなたのMBTI風タイプ：",
            "margins_lede": "各軸のマージンは、どちら側にどれだけ傾いているかを示します。",
            "margin_chart": "軸マージン（E/S/T/J が正）",
            "preference": "の傾向",
            "margin_label": "マージン",
            "scores_heading": "スタイル・エクスポージャー・スコア",
            "scores_heading_blended": "MBTIブレンド済みスタイル・エクスポージャー・スコア",
            "scores_lede": "スコアは0–10。回答のみから算出（MBTI補正なし）。",
            "scores_lede_blended": "スコアは0–10。軸の強さに基づくMBTI補正を含みます。",
            "mix_heading": "ファクター構成",
            "blend_on": "MBTIをスタイルにブレンド",
            "blend_off": "回答のみを表示",
            "retake": "やり直す",
            "download_csv": "CSVをダウンロード",
            "download_pdf": "PDFをダウンロード",
            "progress": "進捗：{answered}/{total}（{percent}%）",
        },
        "strength": {
            "very strong": "非常に強い",
            "strong": "強い",
            "moderate": "中程度の",
            "slight": "わずかな",
        },
        "errors": {
            "missing_questions": "すべての設問に回答してください。未回答: {missing}",
            "invalid_answer": "{question} の回答が不正です: {reason}",
            "incomplete_export": "回答が不完全なためエクスポートできません。",
            "export_failed": "レポートを作成できませんでした。結果はそのままです。もう一度お試しください。",
        },
        "pdf": {
            "title": "ファクター性格レポート",
            "type_code": "MBTIタイプ",
            "axis_breakdown": "軸の内訳",
            "axis_line": "{axis}（{title}）：{selected} · {strength}（マージン {margin}）",
            "factor_scores": "スタイル・エクスポージャー・スコア",
            "factor_scores_blended": "MBTIブレンド済みスタイル・エクスポージャー・スコア",
            "factor_line": "{factor}：{score} / 10 · {pct}%",
            "answer_summary": "回答のまとめ",
        },
    },
}


def get_copy(language: str) -> Dict[str, Dict[str, str] | str]:
    return COPY.get(language, COPY[DEFAULT_LANGUAGE])


def build_language_switcher(language: str):
    links = []
    for code, meta in LANGUAGES.items():
        query_args = request.args.to_dict() if request.method == "GET" else {}
        query_args["lang"] = code
        endpoint = request.endpoint if request.method == "GET" and request.endpoint else "questionnaire"
        try:
            url = url_for(endpoint, **query_args)
        except Exception:
            url = url_for("questionnaire", lang=code)
        links.append({"code": code, "label": meta["label"], "url": url, "active": code == language})
    return links


@app.before_request
def set_language():
    g.language = resolve_language(request.values.get("lang"))


@app.context_processor
def inject_language():
    language = getattr(g, "language", DEFAULT_LANGUAGE)
    return {
        "language": language,
        "copy": get_copy(language),
        "language_switcher": build_language_switcher(language),
    }


@app.errorhandler(AnswerValidationError)
def handle_invalid_answer(error: AnswerValidationError):
    language = getattr(g, "language", DEFAULT_LANGUAGE)
    logger.warning("Rejected answer input: %s", error)
    message = get_copy(language)["errors"]["invalid_answer"].format(  # type: ignore[index]
        question=error.question_id, reason=error.reason
    )
    return (message, 400)


def new_seed() -> int:
    seed = app.config.get("QUIZ_SEED")
    if seed is not None:
        return int(seed)
    return random.randrange(1, 1_000_000)


def read_seed(values) -> int | None:
    raw = values.get("seed")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise AnswerValidationError("seed", f"not an integer: {raw!r}") from None


def working_set(seed: int):
    return select_questions(seed, app.config["QUIZ_QUESTION_LIMIT"])


def answer_fields(values) -> Dict[str, str]:
    return {field: value for field, value in values.items() if field.startswith("q_")}


def localized_breakdown(margins, language: str):
    strength_labels = get_copy(language)["strength"]
    breakdown = axis_breakdown(margins, language)
    for axis in breakdown:
        axis["strength_label"] = strength_labels[axis["strength"]]  # type: ignore[index]
    return breakdown


def render_quiz(seed: int, error: str | None = None, submitted=None):
    language = getattr(g, "language", DEFAULT_LANGUAGE)
    questions = working_set(seed)
    items = [
        {"question": question, "text": question_text(question, language), "axis_label": AXES[question.axis].label}
        for question in questions
    ]
    return render_template(
        "quiz.html",
        items=items,
        options=LIKERT_OPTIONS,
        seed=seed,
        error=error,
        submitted=submitted or {},
    )


@app.route("/", methods=["GET", "POST"])
def questionnaire():
    language = getattr(g, "language", DEFAULT_LANGUAGE)

    if request.method == "POST":
        seed = read_seed(request.form)
        if seed is None:
            return redirect(url_for("questionnaire", lang=language))
        questions = working_set(seed)
        fields = answer_fields(request.form)
        answers = parse_answers(fields, questions)

        missing = [question.id for question in questions if question.id not in answers]
        if missing:
            error_message = get_copy(language)["errors"]["missing_questions"].format(  # type: ignore[index]
                missing=", ".join(missing)
            )
            return render_quiz(seed, error=error_message, submitted=fields)

        query_params: Dict[str, object] = {"lang": language, "seed": seed, "blend": 1}
        query_params.update(fields)
        return redirect(url_for("results", **query_params))

    seed = read_seed(request.args)
    if seed is None:
        return redirect(url_for("questionnaire", lang=language, seed=new_seed()))
    return render_quiz(seed)


@app.get("/results")
def results():
    language = getattr(g, "language", DEFAULT_LANGUAGE)
    seed = read_seed(request.args)
    if seed is None:
        return redirect(url_for("questionnaire", lang=language))

    questions = working_set(seed)
    fields = answer_fields(request.args)
    answers = parse_answers(fields, questions)
    if len(answers) != len(questions):
        return redirect(url_for("questionnaire", lang=language, seed=seed))

    blend = request.args.get("blend", "1") != "0"
    result = score_profile(questions, answers)
    logger.info("Profile %s computed from %d answers (blend=%s)", result.type_code, len(answers), blend)

    scores = result.factor_scores(blend)
    breakdown = localized_breakdown(result.margins, language)

    factors: List[Dict[str, object]] = [
        {
            "key": factor,
            "name": AXES[factor].label,
            "color": AXES[factor].color,  # type: ignore[union-attr]
            "pct": result.factor_mix[factor],
            "score": scores[factor],
            "description": axis_description(factor, language),
        }
        for factor in FACTOR_AXES
    ]
    upper_limit = radar_upper_limit(scores)
    toggle_args = {"lang": language, "seed": seed, "blend": 0 if blend else 1, **fields}

    return render_template(
        "result.html",
        result=result,
        breakdown=breakdown,
        factors=sorted(factors, key=lambda item: item["score"], reverse=True),  # type: ignore[arg-type, return-value]
        mix=factors,
        blend=blend,
        upper_limit=upper_limit,
        progress=progress(questions, answers),
        toggle_url=url_for("results", **toggle_args),
        seed=seed,
        fields=fields,
    )


def _export_inputs():
    form_values = request.form.to_dict()
    language = resolve_language(form_values.get("lang"))
    seed = read_seed(form_values)
    if seed is None:
        return language, None, None
    questions = working_set(seed)
    answers = parse_answers(answer_fields(form_values), questions)
    if len(answers) != len(questions):
        return language, None, None
    return language, questions, answers


@app.post("/export/csv")
def export_csv():
    language, questions, answers = _export_inputs()
    if questions is None:
        return (get_copy(language)["errors"]["incomplete_export"], 400)  # type: ignore[index]

    result = score_profile(questions, answers)
    try:
        csv_buffer = generate_csv_report(questions, answers, result)
    except ReportExportError:
        logger.exception("CSV export failed for %s", result.type_code)
        return (get_copy(language)["errors"]["export_failed"], 500)  # type: ignore[index]

    return send_file(
        csv_buffer,
        mimetype="text/csv; charset=utf-8",
        as_attachment=True,
        download_name=CSV_FILENAME,
    )


@app.post("/export/pdf")
def export_pdf():
    language, questions, answers = _export_inputs()
    if questions is None:
        return (get_copy(language)["errors"]["incomplete_export"], 400)  # type: ignore[index]

    blend = request.form.get("blend", "1") != "0"
    result = score_profile(questions, answers)
    # Japanese copy needs the bundled font; core PDF fonts only cover Latin-1
    pdf_language = language if unicode_font_available() else "en"
    try:
        pdf_buffer = generate_pdf_report(
            questions=questions,
            answers=answers,
            result=result,
            breakdown=localized_breakdown(result.margins, pdf_language),
            pdf_text=get_copy(pdf_language)["pdf"],  # type: ignore[arg-type]
            blend=blend,
        )
    except ReportExportError:
        logger.exception("PDF export failed for %s", result.type_code)
        return (get_copy(language)["errors"]["export_failed"], 500)  # type: ignore[index]

    return send_file(
        pdf_buffer,
        mimetype="application/pdf",
        as_attachment=True,
        download_name=f"FactorPersonality_{result.type_code}.pdf",
    )


@app.get("/health")
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    app.run(debug=True, port=5001)

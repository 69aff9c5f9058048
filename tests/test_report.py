import pytest

from questions import FACTOR_AXES, FACTOR_QUESTIONS, QUESTION_BY_ID, Question
from report import (
    CSV_FACTOR_HEADER,
    build_csv_rows,
    format_number,
    generate_csv_report,
    generate_pdf_report,
    sanitize_for_pdf,
)
from scoring import axis_breakdown, score_profile

PDF_TEXT = {
    "title": "Factor-Personality Report",
    "type_code": "MBTI Type",
    "axis_breakdown": "Axis Breakdown",
    "axis_line": "{axis} ({title}): {selected} · {strength} (margin {margin})",
    "factor_scores": "Style Exposure Scores",
    "factor_scores_blended": "MBTI-Blended Style Exposure Scores",
    "factor_line": "{factor}: {score} / 10 · {pct}%",
    "answer_summary": "Answer Summary",
}


@pytest.fixture
def scored():
    questions = [QUESTION_BY_ID["EI1"], QUESTION_BY_ID["SN2"]] + FACTOR_QUESTIONS[:8]
    answers = {question.id: 5 for question in questions}
    del answers["SN2"]
    return questions, answers, score_profile(questions, answers)


def test_csv_rows_follow_report_layout(scored):
    questions, answers, result = scored
    rows = build_csv_rows(questions, answers, result)

    assert rows[0] == ["#", "Axis", "Question", "Answer(Label)"]
    assert rows[1] == ["1", "EI", "I feel energized after meeting new people.", "Strongly Agree"]
    assert rows[2] == ["2", "SN", "I often think about big-picture possibilities.", ""]
    separator = len(questions) + 1
    assert rows[separator] == []
    assert rows[separator + 1] == ["MBTI Type", result.type_code]
    assert rows[separator + 2] == []
    assert rows[separator + 3] == CSV_FACTOR_HEADER
    factor_rows = rows[separator + 4 :]
    assert [row[0] for row in factor_rows] == list(FACTOR_AXES)
    assert factor_rows[0][1:3] == ["12.5", "1.3"]


def test_csv_quotes_every_field_and_doubles_quotes():
    question = Question("Q1", 'I say "yes" often, honestly.', "Value", 1)
    result = score_profile([question], {"Q1": 4})
    content = generate_csv_report([question], {"Q1": 4}, result).getvalue().decode("utf-8")
    lines = content.split("\n")

    assert lines[0] == '"#","Axis","Question","Answer(Label)"'
    assert lines[1] == '"1","Value","I say ""yes"" often, honestly.","Agree"'
    assert lines[2] == ""
    assert lines[3] == '"MBTI Type","ESTJ"'
    assert lines[5] == '"Factor","Percent(%)","Base Style Score (0-10)","MBTI-Blended Score (0-10)"'
    assert '"Value","100","10","10"' in lines


def test_csv_keeps_unicode_text():
    question = Question("Q1", "I’d rather text than call.", "EI", -1)
    result = score_profile([question], {"Q1": 1})
    content = generate_csv_report([question], {"Q1": 1}, result).getvalue()
    assert "I’d rather".encode("utf-8") in content


@pytest.mark.parametrize("value, expected", [(12.5, "12.5"), (0.0, "0"), (10.0, "10"), (None, "")])
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_sanitize_for_pdf():
    assert sanitize_for_pdf("I’d — “ok”") == "I'd - \"ok\""


def test_pdf_report_bytes(scored):
    questions, answers, result = scored
    buffer = generate_pdf_report(
        questions=questions,
        answers=answers,
        result=result,
        breakdown=axis_breakdown(result.margins),
        pdf_text=PDF_TEXT,
        blend=False,
    )
    data = buffer.getvalue()
    assert data.startswith(b"%PDF")
    assert len(data) > 1024

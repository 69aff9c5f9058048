import pytest

from questions import (
    AXES,
    BIPOLAR_AXES,
    FACTOR_AXES,
    FACTOR_QUESTIONS,
    MBTI_QUESTIONS,
    QUESTION_BY_ID,
    QUESTIONS,
    Question,
    select_questions,
)
from scoring import (
    AnswerValidationError,
    aggregate_margins,
    base_scores,
    blend_scores,
    classify_type,
    interpret_strength,
    normalize_factors,
    parse_answers,
    radar_upper_limit,
    response_to_score,
    score_profile,
    side_strength,
)


def _axis_questions(axis_key):
    return [question for question in QUESTIONS if question.axis == axis_key]


@pytest.mark.parametrize(
    "answer, weight, expected",
    [
        (3, 1, 0),
        (3, -1, 0),
        (4, 1, 1),
        (2, 1, -1),
        (5, 1, 2),
        (1, 1, -2),
        (1, -1, 2),
        (5, -1, -2),
    ],
)
def test_response_to_score_staircase(answer, weight, expected):
    assert response_to_score(answer, weight) == expected


def test_aggregate_margins_initialises_every_axis():
    margins = aggregate_margins([], {})
    assert set(margins) == set(AXES)
    assert all(value == 0 for value in margins.values())


def test_aggregate_margins_skips_unanswered_questions():
    questions = _axis_questions("EI")
    margins = aggregate_margins(questions, {"EI1": 5, "EI2": 1})
    assert margins["EI"] == 4
    assert margins["SN"] == 0


def test_aggregate_margins_is_order_independent():
    questions = select_questions(seed=7)
    answers = {question.id: (index % 5) + 1 for index, question in enumerate(questions)}
    forward = aggregate_margins(questions, answers)
    backward = aggregate_margins(list(reversed(questions)), answers)
    assert forward == backward


def test_single_extravert_answer_scenario():
    question = QUESTION_BY_ID["EI1"]
    result = score_profile([question], {"EI1": 5})

    assert result.margins["EI"] == 2
    assert all(result.margins[key] == 0 for key in AXES if key != "EI")
    assert result.type_code[0] == "E"
    assert result.type_code == "ESTJ"
    assert all(pct == 0 for pct in result.factor_mix.values())
    assert all(score == 0 for score in result.base_scores.values())


def test_zero_margin_resolves_to_first_pole():
    margins = {key: 0.0 for key in AXES}
    codes = {classify_type(margins) for _ in range(5)}
    assert codes == {"ESTJ"}


def test_negative_margins_pick_second_pole():
    margins = {key: 0.0 for key in AXES}
    margins.update({"EI": -1, "SN": -4, "TF": 2, "JP": -16})
    assert classify_type(margins) == "INTP"


@pytest.mark.parametrize(
    "margin, label",
    [
        (0, "slight"),
        (2.9, "slight"),
        (3, "moderate"),
        (-5, "moderate"),
        (6, "strong"),
        (-9, "strong"),
        (10, "very strong"),
        (-16, "very strong"),
    ],
)
def test_interpret_strength_thresholds(margin, label):
    assert interpret_strength(margin) == label


def test_uniform_factor_mix_scenario():
    questions = FACTOR_QUESTIONS[:8]
    assert [question.axis for question in questions] == list(FACTOR_AXES)
    result = score_profile(questions, {question.id: 5 for question in questions})

    assert all(result.margins[factor] == 2 for factor in FACTOR_AXES)
    assert all(result.factor_mix[factor] == 12.5 for factor in FACTOR_AXES)
    assert sum(result.factor_mix.values()) == pytest.approx(100.0)
    # 12.5% re-expressed on the 0-10 scale rounds half up
    assert all(result.base_scores[factor] == 1.3 for factor in FACTOR_AXES)


def test_normalize_factors_without_signal_is_all_zero():
    mix = normalize_factors({factor: 0 for factor in FACTOR_AXES})
    assert mix == {factor: 0.0 for factor in FACTOR_AXES}


def test_normalize_factors_uses_absolute_margins():
    margins = {factor: 0 for factor in FACTOR_AXES}
    margins.update({"Quality": -3, "Growth": 1})
    mix = normalize_factors(margins)
    assert mix["Quality"] == 75.0
    assert mix["Growth"] == 25.0


def test_percentages_sum_to_hundred_within_rounding():
    margins = {factor: 0 for factor in FACTOR_AXES}
    margins.update({"Quality": 1, "Momentum": 1, "Value": 1, "Growth": 4, "Size": 2, "Yield": 3})
    mix = normalize_factors(margins)
    assert abs(sum(mix.values()) - 100.0) <= 0.1 * len(FACTOR_AXES)


def test_base_scores_are_percentages_over_ten():
    scores = base_scores({"Quality": 100.0, "Momentum": 37.5, "Value": 0.0})
    assert scores == {"Quality": 10.0, "Momentum": 3.8, "Value": 0.0}


def test_side_strength_saturates():
    assert side_strength(0) == 0
    assert side_strength(-8) == 0.5
    assert side_strength(16) == 1
    assert side_strength(40) == 1


def test_blend_adds_favoured_pole_influence():
    margins = {key: 0.0 for key in AXES}
    margins["EI"] = 16
    base = {factor: 0.0 for factor in FACTOR_AXES}
    blended = blend_scores(base, margins)

    # E at full strength: Liquidity 1.0, Momentum 0.6, Size 0.4 scaled by 1.2
    assert blended["Liquidity"] == 1.2
    assert blended["Momentum"] == 0.7
    assert blended["Size"] == 0.5
    assert blended["Quality"] == 0.0


def test_blend_clamps_at_both_ends():
    margins = {key: 0.0 for key in AXES}
    margins.update({"EI": -16, "SN": 16, "TF": 16, "JP": 16})
    high = blend_scores({factor: 10.0 for factor in FACTOR_AXES}, margins)
    assert all(score == 10.0 for score in high.values())

    low = blend_scores({factor: -3.0 for factor in FACTOR_AXES}, {key: 0.0 for key in AXES})
    assert all(score == 0.0 for score in low.values())


def test_blend_clamps_once_after_all_axes():
    margins = {key: 0.0 for key in AXES}
    margins.update({"EI": -16, "SN": 16, "TF": 16, "JP": 16})
    # Quality starts at 9.0 and receives I, S, T and J contributions
    blended = blend_scores({"Quality": 9.0}, margins)
    assert blended["Quality"] == 10.0


def test_scores_stay_in_range_for_extreme_answers():
    questions = select_questions(seed=3)
    for value in (1, 5):
        result = score_profile(questions, {question.id: value for question in questions})
        for scores in (result.base_scores, result.blended_scores):
            assert all(0 <= score <= 10 for score in scores.values())


def test_pipeline_is_idempotent():
    questions = select_questions(seed=11)
    answers = {question.id: ((index * 3) % 5) + 1 for index, question in enumerate(questions)}
    assert score_profile(questions, answers) == score_profile(questions, answers)


def test_blend_toggle_only_changes_factor_scores():
    questions = select_questions(seed=5)
    answers = {question.id: 5 if question.weight > 0 else 2 for question in questions}
    result = score_profile(questions, answers)

    blended = result.factor_scores(True)
    unblended = result.factor_scores(False)
    assert blended == result.blended_scores
    assert unblended == result.base_scores
    assert blended != unblended
    assert score_profile(questions, answers).margins == result.margins


def test_empty_answers_are_degenerate_not_errors():
    result = score_profile(select_questions(seed=1), {})
    assert result.type_code == "ESTJ"
    assert set(result.strengths.values()) == {"slight"}
    assert all(pct == 0 for pct in result.factor_mix.values())
    assert all(score == 0 for score in result.blended_scores.values())


def test_parse_answers_accepts_field_names_and_ids():
    questions = _axis_questions("TF")
    answers = parse_answers({"q_TF1": "5", "TF2": 2, "q_TF3": ""}, questions)
    assert answers == {"TF1": 5, "TF2": 2}


@pytest.mark.parametrize("value", ["0", "6", "abc", "4.5", 2.5])
def test_parse_answers_rejects_bad_values(value):
    with pytest.raises(AnswerValidationError) as excinfo:
        parse_answers({"q_EI1": value}, [QUESTION_BY_ID["EI1"]])
    assert excinfo.value.question_id == "EI1"


def test_parse_answers_rejects_unknown_question():
    with pytest.raises(AnswerValidationError) as excinfo:
        parse_answers({"q_ZZ9": "3"}, [QUESTION_BY_ID["EI1"]])
    assert excinfo.value.question_id == "q_ZZ9"


def test_engine_accepts_arbitrary_subset():
    custom = [Question("X1", "Custom", "Value", 1), Question("X2", "Custom", "JP", -1)]
    result = score_profile(custom, {"X1": 4, "X2": 5})
    assert result.margins["Value"] == 1
    assert result.margins["JP"] == -2
    assert result.type_code == "ESTP"
    assert result.factor_mix["Value"] == 100.0
    assert result.base_scores["Value"] == 10.0


def test_select_questions_is_reproducible():
    first = select_questions(seed=42)
    second = select_questions(seed=42)
    assert [q.id for q in first] == [q.id for q in second]
    assert len(first) == 40
    assert not {"EI5", "SN5", "TF5", "JP5", "EI8"} & {q.id for q in first}
    assert len(MBTI_QUESTIONS) == 32 and len(FACTOR_QUESTIONS) == 13


def test_axis_variants_are_distinguished():
    assert all(AXES[key].kind == "bipolar" for key in BIPOLAR_AXES)
    assert all(AXES[key].kind == "unipolar" for key in FACTOR_AXES)


@pytest.mark.parametrize(
    "top, expected",
    [(0.0, 2.0), (1.2, 2.0), (3.2, 4.0), (4.6, 5.5), (9.8, 10.0)],
)
def test_radar_upper_limit(top, expected):
    assert radar_upper_limit({"Quality": top, "Value": 0.0}) == expected

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping

from questions import AXES, BIPOLAR_AXES, FACTOR_AXES, Question, axis_description

logger = logging.getLogger(__name__)

LIKERT_MIN = 1
LIKERT_MAX = 5
LIKERT_NEUTRAL = 3

# Largest |margin| a bipolar axis can reach: 8 questions x step 2
MAX_AXIS_MARGIN = 16
BLEND_ALPHA = 1.2

STRENGTH_THRESHOLDS = (
    (10, "very strong"),
    (6, "strong"),
    (3, "moderate"),
)

# Heuristic overlay: favoured pole -> factor affinities
MBTI_INFLUENCE: Dict[str, Dict[str, float]] = {
    "E": {"Liquidity": 1.0, "Momentum": 0.6, "Size": 0.4},
    "I": {"Quality": 0.8, "LowVol": 0.8, "Value": 0.4},
    "S": {"Value": 0.8, "LowVol": 0.5, "Quality": 0.4, "Momentum": 0.2},
    "N": {"Growth": 0.9, "Momentum": 0.6, "Liquidity": 0.2},
    "T": {"Value": 0.7, "Quality": 0.5, "LowVol": 0.2},
    "F": {"Yield": 0.8, "Liquidity": 0.4, "Growth": 0.2},
    "J": {"Quality": 0.7, "LowVol": 0.5, "Yield": 0.4},
    "P": {"Momentum": 0.7, "Size": 0.6, "Liquidity": 0.4, "Growth": 0.2},
}


class AnswerValidationError(ValueError):
    """Raw answer input that cannot enter the scoring engine."""

    def __init__(self, question_id: str, reason: str):
        super().__init__(f"{question_id}: {reason}")
        self.question_id = question_id
        self.reason = reason


@dataclass(frozen=True)
class ProfileResult:
    margins: Dict[str, float]
    type_code: str
    strengths: Dict[str, str]
    factor_mix: Dict[str, float]
    base_scores: Dict[str, float]
    blended_scores: Dict[str, float]

    def factor_scores(self, blend: bool) -> Dict[str, float]:
        return self.blended_scores if blend else self.base_scores


def round_half_up(value: float, digits: int = 1) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def response_to_score(answer: int, weight: int) -> int:
    base = answer - LIKERT_NEUTRAL
    if base == 0:
        step = 0
    elif base > 0:
        step = 1 if base == 1 else 2
    else:
        step = -1 if base == -1 else -2
    return step * weight


def aggregate_margins(questions: Iterable[Question], answers: Mapping[str, int]) -> Dict[str, float]:
    margins = {axis_key: 0.0 for axis_key in AXES}
    for question in questions:
        answer = answers.get(question.id)
        if answer is None:
            continue
        margins[question.axis] += response_to_score(answer, question.weight)
    return margins


def pick_pole(axis_key: str, margin: float) -> str:
    first, second = AXES[axis_key].poles  # type: ignore[union-attr]
    return first if margin >= 0 else second


def classify_type(margins: Mapping[str, float]) -> str:
    return "".join(pick_pole(axis_key, margins.get(axis_key, 0.0)) for axis_key in BIPOLAR_AXES)


def interpret_strength(margin: float) -> str:
    magnitude = abs(margin)
    for threshold, label in STRENGTH_THRESHOLDS:
        if magnitude >= threshold:
            return label
    return "slight"


def axis_breakdown(margins: Mapping[str, float], language: str = "en") -> List[Dict[str, object]]:
    breakdown = []
    for axis_key in BIPOLAR_AXES:
        axis = AXES[axis_key]
        margin = margins.get(axis_key, 0.0)
        breakdown.append(
            {
                "axis_key": axis_key,
                "title": axis.label,
                "poles": axis.poles,  # type: ignore[union-attr]
                "margin": margin,
                "selected": pick_pole(axis_key, margin),
                "strength": interpret_strength(margin),
                "description": axis_description(axis_key, language),
            }
        )
    return breakdown


def normalize_factors(margins: Mapping[str, float]) -> Dict[str, float]:
    """Share of each factor in the total absolute factor margin, in percent.

    Every share is 0 when no factor carries any signal.
    """
    total = sum(abs(margins.get(factor, 0.0)) for factor in FACTOR_AXES)
    mix = {}
    for factor in FACTOR_AXES:
        if not total:
            mix[factor] = 0.0
            continue
        mix[factor] = math.floor(abs(margins.get(factor, 0.0)) / total * 1000 + 0.5) / 10
    return mix


def base_scores(factor_mix: Mapping[str, float]) -> Dict[str, float]:
    return {factor: round_half_up(pct * 10 / 100) for factor, pct in factor_mix.items()}


def side_strength(margin: float) -> float:
    return min(MAX_AXIS_MARGIN, abs(margin)) / MAX_AXIS_MARGIN


def blend_scores(
    scores: Mapping[str, float],
    margins: Mapping[str, float],
    alpha: float = BLEND_ALPHA,
) -> Dict[str, float]:
    """Overlay the favoured poles' factor affinities onto base scores.

    Contributions from all four axes accumulate first; rounding and the
    [0, 10] clamp apply once at the end.
    """
    blended = dict(scores)
    for axis_key in BIPOLAR_AXES:
        margin = margins.get(axis_key, 0.0)
        pole = pick_pole(axis_key, margin)
        strength = side_strength(margin)
        for factor, weight in MBTI_INFLUENCE.get(pole, {}).items():
            blended[factor] = blended.get(factor, 0.0) + weight * strength * alpha
    return {factor: max(0.0, min(10.0, round_half_up(value))) for factor, value in blended.items()}


def parse_answers(raw: Mapping[str, object], questions: Iterable[Question]) -> Dict[str, int]:
    """Validate raw form values into a question id -> Likert answer mapping.

    Keys may be question ids or form field names. Blank values count as
    unanswered; unknown ids and values outside 1..5 are rejected.
    """
    by_key: Dict[str, Question] = {}
    for question in questions:
        by_key[question.id] = question
        by_key[question.field_name] = question

    answers: Dict[str, int] = {}
    for key, value in raw.items():
        question = by_key.get(key)
        if question is None:
            raise AnswerValidationError(key, "unknown question")
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        try:
            answer = int(value)  # type: ignore[call-overload]
        except (TypeError, ValueError):
            raise AnswerValidationError(question.id, f"not an integer: {value!r}") from None
        if isinstance(value, float) and value != answer:
            raise AnswerValidationError(question.id, f"not an integer: {value!r}")
        if not LIKERT_MIN <= answer <= LIKERT_MAX:
            raise AnswerValidationError(question.id, f"answer {answer} outside {LIKERT_MIN}..{LIKERT_MAX}")
        answers[question.id] = answer
    return answers


def score_profile(questions: Iterable[Question], answers: Mapping[str, int]) -> ProfileResult:
    questions = list(questions)
    margins = aggregate_margins(questions, answers)
    factor_mix = normalize_factors(margins)
    base = base_scores(factor_mix)
    result = ProfileResult(
        margins=margins,
        type_code=classify_type(margins),
        strengths={axis_key: interpret_strength(margins[axis_key]) for axis_key in BIPOLAR_AXES},
        factor_mix=factor_mix,
        base_scores=base,
        blended_scores=blend_scores(base, margins),
    )
    logger.debug(
        "Scored %d/%d answers -> %s",
        sum(1 for q in questions if q.id in answers),
        len(questions),
        result.type_code,
    )
    return result


def radar_upper_limit(scores: Mapping[str, float]) -> float:
    """Radar chart domain: headroom above the top score, between 2 and 10."""
    top = max([0.0, *scores.values()])
    return min(10.0, max(2.0, math.ceil((top + 0.5) * 2) / 2))


def progress(questions: Iterable[Question], answers: Mapping[str, int]) -> Dict[str, int]:
    questions = list(questions)
    answered = sum(1 for q in questions if q.id in answers)
    total = len(questions)
    percent = math.floor(answered / total * 100 + 0.5) if total else 0
    return {"answered": answered, "total": total, "percent": percent}


from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Question:
    id: str
    text: str  # English prompt, also used for the CSV export
    axis: str
    weight: int  # +1 when "agree" supports the first pole / the factor

    @property
    def field_name(self) -> str:
        return f"q_{self.id}"


@dataclass(frozen=True)
class BipolarAxis:
    key: str
    label: str
    poles: Tuple[str, str]
    description: str

    kind = "bipolar"


@dataclass(frozen=True)
class UnipolarAxis:
    key: str
    label: str
    description: str
    color: str

    kind = "unipolar"


Axis = Union[BipolarAxis, UnipolarAxis]

LANGUAGES: Dict[str, Dict[str, str]] = {
    "en": {"label": "English"},
    "ja": {"label": "日本語"},
}
DEFAULT_LANGUAGE = "en"

BIPOLAR_AXES: Tuple[str, ...] = ("EI", "SN", "TF", "JP")
FACTOR_AXES: Tuple[str, ...] = (
    "Quality",
    "Momentum",
    "Value",
    "Growth",
    "LowVol",
    "Size",
    "Yield",
    "Liquidity",
)

AXES: Dict[str, Axis] = {
    "EI": BipolarAxis("EI", "Extraversion vs Introversion", ("E", "I"), "Energy from interaction vs reflection"),
    "SN": BipolarAxis("SN", "Sensing vs iNtuition", ("S", "N"), "Facts/details vs patterns/possibilities"),
    "TF": BipolarAxis("TF", "Thinking vs Feeling", ("T", "F"), "Logic/criteria vs values/empathy"),
    "JP": BipolarAxis("JP", "Judging vs Perceiving", ("J", "P"), "Structure/closure vs flexibility/openness"),
    "Quality": UnipolarAxis("Quality", "Quality", "Careful, precise, consistent", "#e11d48"),
    "Momentum": UnipolarAxis("Momentum", "Momentum", "Adaptive, rides trends", "#2563eb"),
    "Value": UnipolarAxis("Value", "Value", "Pragmatic, grounded", "#ca8a04"),
    "Growth": UnipolarAxis("Growth", "Growth", "Visionary, forward-looking", "#7c3aed"),
    "LowVol": UnipolarAxis("LowVol", "Low Volatility", "Calm, steady, risk-aware", "#0ea5e9"),
    "Size": UnipolarAxis("Size", "Size (Small)", "Entrepreneurial, nimble", "#059669"),
    "Yield": UnipolarAxis("Yield", "Yield", "Dependable, supportive", "#f97316"),
    "Liquidity": UnipolarAxis("Liquidity", "Liquidity", "Social, connector", "#10b981"),
}

# Result-page descriptions shown when the Japanese locale is selected
AXIS_DESCRIPTIONS_JA: Dict[str, str] = {
    "EI": "交流からエネルギーを得るか、内省から得るか",
    "SN": "事実・細部を重視するか、パターン・可能性を重視するか",
    "TF": "論理・基準で判断するか、価値・共感で判断するか",
    "JP": "構造と締切を好むか、柔軟さと選択肢を残すか",
    "Quality": "丁寧・正確・一貫性",
    "Momentum": "流れに乗り素早く適応",
    "Value": "実直で地に足がついた姿勢",
    "Growth": "未来志向・ビジョン重視",
    "LowVol": "落ち着き・安定・リスク配慮",
    "Size": "起業家的・小回りが利く",
    "Yield": "頼れる・安定的に支える",
    "Liquidity": "つながりを作り橋渡しする",
}

LIKERT_OPTIONS: List[Dict[str, object]] = [
    {"value": 1, "label": {"en": "Strongly Disagree", "ja": "全くそう思わない"}},
    {"value": 2, "label": {"en": "Disagree", "ja": "あまりそう思わない"}},
    {"value": 3, "label": {"en": "Neutral", "ja": "どちらとも言えない"}},
    {"value": 4, "label": {"en": "Agree", "ja": "そう思う"}},
    {"value": 5, "label": {"en": "Strongly Agree", "ja": "とてもそう思う"}},
]

MBTI_QUESTIONS: List[Question] = [
    # EI
    Question("EI1", "I feel energized after meeting new people.", "EI", 1),
    Question("EI2", "I prefer deep, solitary work to group sessions.", "EI", -1),
    Question("EI3", "I talk through ideas to clarify my thinking.", "EI", 1),
    Question("EI4", "I need quiet time alone most days to recharge.", "EI", -1),
    Question("EI5", "I enjoy being the one to start conversations.", "EI", 1),
    Question("EI6", "Large social events drain me quickly.", "EI", -1),
    Question("EI7", "I make friends easily in new settings.", "EI", 1),
    Question("EI8", "I’d rather text than hop on a spontaneous call.", "EI", -1),
    # SN
    Question("SN1", "I trust concrete facts over hunches.", "SN", 1),
    Question("SN2", "I often think about big-picture possibilities.", "SN", -1),
    Question("SN3", "I like step-by-step instructions.", "SN", 1),
    Question("SN4", "I enjoy exploring patterns more than details.", "SN", -1),
    Question("SN5", "I prefer proven methods to experimental ones.", "SN", 1),
    Question("SN6", "I focus on what could be rather than what is.", "SN", -1),
    Question("SN7", "I notice practical details others miss.", "SN", 1),
    Question("SN8", "I get excited by abstract theories.", "SN", -1),
    # TF
    Question("TF1", "I make decisions by analyzing pros and cons.", "TF", 1),
    Question("TF2", "I prioritize harmony even if logic says otherwise.", "TF", -1),
    Question("TF3", "I value fairness over personal circumstances.", "TF", 1),
    Question("TF4", "I weigh people’s feelings heavily in choices.", "TF", -1),
    Question("TF5", "I’m comfortable giving blunt, objective feedback.", "TF", 1),
    Question("TF6", "I avoid conflict even when I disagree.", "TF", -1),
    Question("TF7", "I prefer criteria to vibes when judging options.", "TF", 1),
    Question("TF8", "I decide with my heart more than my head.", "TF", -1),
    # JP
    Question("JP1", "I like schedules and to-do lists.", "JP", 1),
    Question("JP2", "I keep plans flexible and open-ended.", "JP", -1),
    Question("JP3", "I feel better once decisions are finalized.", "JP", 1),
    Question("JP4", "I’m comfortable delaying decisions to gather more info.", "JP", -1),
    Question("JP5", "I prefer clear structure over spontaneity.", "JP", 1),
    Question("JP6", "I work best when I can adapt plans on the fly.", "JP", -1),
    Question("JP7", "I plan my work and work my plan.", "JP", 1),
    Question("JP8", "I like to keep options open as long as possible.", "JP", -1),
]

FACTOR_QUESTIONS: List[Question] = [
    Question("FQ1", "I double-check my work for accuracy and consistency.", "Quality", 1),
    Question("FQ2", "I act quickly on opportunities that seem to be gaining traction.", "Momentum", 1),
    Question("FQ3", "I look for undervalued ideas that others ignore.", "Value", 1),
    Question("FQ4", "I focus on long-term vision over short-term outcomes.", "Growth", 1),
    Question("FQ5", "I prefer steady progress and avoid unnecessary risk.", "LowVol", 1),
    Question("FQ6", "I like taking bold initiatives independently.", "Size", 1),
    Question("FQ7", "I enjoy providing stable, predictable support.", "Yield", 1),
    Question("FQ8", "I thrive when connecting and collaborating with others.", "Liquidity", 1),
    # Extras that keep the working set at 40 after the overlap trim
    Question("FQ9", "I enjoy working in fast-paced, evolving environments.", "Momentum", 1),
    Question("FQ10", "I am cautious with risks and think about downside protection.", "LowVol", 1),
    Question("FQ11", "I think about compounding effects over time.", "Growth", 1),
    Question("FQ12", "I take pride in being dependable and consistent.", "Yield", 1),
    Question("FQ13", "I move fluidly across different teams and ideas.", "Liquidity", 1),
]

QUESTIONS: List[Question] = MBTI_QUESTIONS + FACTOR_QUESTIONS
QUESTION_BY_ID: Dict[str, Question] = {question.id: question for question in QUESTIONS}

# Dichotomous items whose themes overlap the factor overlay
OVERLAP_IDS = frozenset({"EI5", "SN5", "TF5", "JP5", "EI8"})
DEFAULT_QUESTION_LIMIT = 40

QUESTION_TEXT_JA: Dict[str, str] = {
    "EI1": "新しい人と会うと元気が出る。",
    "EI2": "グループよりも一人で深く作業する方が好きだ。",
    "EI3": "考えを整理するために声に出して話す。",
    "EI4": "充電するには静かな一人の時間が必要だ。",
    "EI5": "会話を始める役になるのが好きだ。",
    "EI6": "大きな社交の場はすぐに疲れてしまう。",
    "EI7": "新しい環境でもすぐに友達ができる。",
    "EI8": "思いつきの電話よりテキストの方がいい。",
    "SN1": "直感よりも具体的な事実を信頼する。",
    "SN2": "大局的な可能性についてよく考える。",
    "SN3": "段階的な手順書が好きだ。",
    "SN4": "細部よりパターンを探る方が楽しい。",
    "SN5": "実験的な方法より実証済みの方法を好む。",
    "SN6": "現状よりも『どうなり得るか』に目が行く。",
    "SN7": "他の人が見落とす実務的な細部に気づく。",
    "SN8": "抽象的な理論にワクワクする。",
    "TF1": "賛否を分析して意思決定する。",
    "TF2": "論理よりも調和を優先することがある。",
    "TF3": "個別事情よりも公正さを重視する。",
    "TF4": "選択の際に人の感情を大切にする。",
    "TF5": "率直で客観的なフィードバックができる。",
    "TF6": "反対でも対立は避けがちだ。",
    "TF7": "判断する時は雰囲気より基準を好む。",
    "TF8": "頭より心で決めることが多い。",
    "JP1": "スケジュールやToDoリストが好きだ。",
    "JP2": "計画は柔軟に開いたままにしておく。",
    "JP3": "決定が固まると安心する。",
    "JP4": "情報を集めるために決定を遅らせても平気だ。",
    "JP5": "明確な構造を自発性より好む。",
    "JP6": "計画をその場で調整しながら進めるのが得意だ。",
    "JP7": "計画を立てて、その計画通りに進める。",
    "JP8": "できるだけ長く選択肢を残しておきたい。",
    "FQ1": "正確さと一貫性のために二重チェックする。",
    "FQ2": "勢いがついている機会には素早く動く。",
    "FQ3": "他人が見過ごす割安なアイデアを探す。",
    "FQ4": "短期より長期のビジョンを重視する。",
    "FQ5": "不要なリスクを避け、着実に進める。",
    "FQ6": "指示が少なくても大胆に主体的に動く。",
    "FQ7": "安定的で予測可能な支援を提供するのが好きだ。",
    "FQ8": "人とつながり協働する時に最も力を発揮する。",
    "FQ9": "変化の速い環境で働くのが楽しい。",
    "FQ10": "リスクには慎重で、下振れを考える。",
    "FQ11": "時間とともに効いてくる複利効果を意識する。",
    "FQ12": "頼りがいと一貫性に誇りを持っている。",
    "FQ13": "異なるチームやアイデアの間をしなやかに行き来できる。",
}


def resolve_language(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_LANGUAGE
    normalized = value.lower()
    return normalized if normalized in LANGUAGES else DEFAULT_LANGUAGE


def question_text(question: Question, language: str) -> str:
    if language == "ja":
        return QUESTION_TEXT_JA.get(question.id) or question.text
    return question.text


def axis_description(axis_key: str, language: str) -> str:
    if language == "ja" and axis_key in AXIS_DESCRIPTIONS_JA:
        return AXIS_DESCRIPTIONS_JA[axis_key]
    return AXES[axis_key].description


def likert_label(value: Optional[int], language: str = "en") -> str:
    if not value:
        return ""
    for option in LIKERT_OPTIONS:
        if option["value"] == value:
            labels = option["label"]
            return labels.get(language) or labels["en"]  # type: ignore[union-attr]
    return str(value)


def select_questions(seed: int, limit: int = DEFAULT_QUESTION_LIMIT) -> List[Question]:
    """Build the presented working set: trim overlapping items, cap, shuffle.

    The order depends only on ``seed`` so a results page or an export can
    rebuild exactly the sequence the respondent saw.
    """
    pool = [q for q in MBTI_QUESTIONS if q.id not in OVERLAP_IDS] + FACTOR_QUESTIONS
    picked = pool[:limit]
    random.Random(seed).shuffle(picked)
    return picked


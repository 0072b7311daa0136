"""
Rule-table separator model recommendation.

Each row is (model name, base score, [(condition, bonus), ...]). Conditions
are evaluated in order against the inputs and matching bonuses are added.
"""
from dataclasses import dataclass, field
from typing import List

from .inputs import CalculatorInputs

MAX_SCORE = 100.0
ALTERNATIVE_COUNT = 3

MODEL_RULES = [
    ('OCW (Oil Cooled)', 70.0, [
        (lambda i: i.magnetic.magnet_gap >= 200, 10.0),
        (lambda i: i.environmental.operating_temperature > 35, 10.0),
        (lambda i: i.geometric.belt_width >= 1200, 5.0),
        (lambda i: i.magnetic.core_belt_ratio >= 0.5, 5.0),
    ]),
    ('EMAX (Air Cooled)', 65.0, [
        (lambda i: i.geometric.belt_width <= 1400, 10.0),
        (lambda i: i.environmental.operating_temperature <= 35, 10.0),
        (lambda i: i.geometric.feed_rate < 500, 5.0),
    ]),
    ('PCB (Permanent Magnet)', 60.0, [
        (lambda i: i.geometric.belt_width <= 1000, 15.0),
        (lambda i: i.magnetic.magnet_gap <= 150, 10.0),
        (lambda i: i.geometric.feed_rate < 200, 5.0),
        (lambda i: i.environmental.operating_temperature > 40, -10.0),
    ]),
    ('OCW-HD (Heavy Duty Oil Cooled)', 62.0, [
        (lambda i: i.geometric.feed_rate >= 1000, 15.0),
        (lambda i: i.geometric.belt_width >= 1800, 15.0),
        (lambda i: i.magnetic.magnet_gap >= 300, 10.0),
    ]),
    ('EMAX-W (Wide Belt Air Cooled)', 58.0, [
        (lambda i: i.geometric.belt_width >= 1600, 15.0),
        (lambda i: i.environmental.operating_temperature <= 30, 5.0),
        (lambda i: i.magnetic.core_belt_ratio < 0.5, 5.0),
    ]),
]

MODEL_NAMES = [name for name, _, _ in MODEL_RULES]


@dataclass(frozen=True)
class ModelScore:
    model: str
    score: float


@dataclass(frozen=True)
class RecommendedModel:
    model: str
    score: float
    alternatives: List[ModelScore] = field(default_factory=list)


def score_models(inputs: CalculatorInputs) -> List[ModelScore]:
    scores = []
    for name, base, rules in MODEL_RULES:
        score = base
        for condition, bonus in rules:
            if condition(inputs):
                score += bonus
        scores.append(ModelScore(model=name, score=min(score, MAX_SCORE)))
    # stable sort keeps table order on ties
    return sorted(scores, key=lambda s: s.score, reverse=True)


def recommend_separator_model(inputs: CalculatorInputs) -> RecommendedModel:
    ranked = score_models(inputs)
    best = ranked[0]
    return RecommendedModel(
        model=best.model,
        score=best.score,
        alternatives=ranked[1:1 + ALTERNATIVE_COUNT],
    )

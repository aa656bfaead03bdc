"""
Weight-adjusted RULA and REBA scores.

RULA scales the final score directly. REBA scales Score A and Score B and
re-runs Table C. The two systems use different weight bands.
"""

import logging
from dataclasses import asdict

from config import REBA_MAX_WEIGHT_MULTIPLIER, REBA_WEIGHT_BANDS, RULA_WEIGHT_BANDS
from models import AdjustedRebaScore, AdjustedRulaScore
from rebaScoring import REBAScorer, get_reba_action_level, get_reba_risk_level
from rulaScoring import get_rula_risk_level, scale_final_score
from utils import round_half_up

logger = logging.getLogger(__name__)

_reba_scorer = REBAScorer()


def get_effective_weight(weight_estimation, manual_weight=None):
    """A manually entered weight wins over the posture estimate"""
    if manual_weight is not None:
        return float(manual_weight)
    if weight_estimation is None:
        return 0.0
    return float(weight_estimation.estimated_weight)


def get_rula_weight_multiplier(weight):
    for threshold, multiplier in RULA_WEIGHT_BANDS:
        if weight > threshold:
            return multiplier
    return 1


def get_reba_weight_multiplier(weight):
    for ceiling, multiplier in REBA_WEIGHT_BANDS:
        if weight <= ceiling:
            return multiplier
    return REBA_MAX_WEIGHT_MULTIPLIER


def calculate_weight_adjusted_rula(base_rula, weight_estimation, manual_weight=None):
    """
    Recalculate a RULA score for a handled load.

    Args:
        base_rula: RulaScore to adjust (left untouched)
        weight_estimation: WeightEstimation for the frame, may be None
        manual_weight: load in kg entered by the user, overrides the estimate

    Returns:
        AdjustedRulaScore, or None when there is no base score
    """
    if base_rula is None:
        return None

    effective_weight = get_effective_weight(weight_estimation, manual_weight)
    multiplier = get_rula_weight_multiplier(effective_weight)
    final_score = scale_final_score(base_rula.final_score, multiplier)

    fields = asdict(base_rula)
    fields.update(final_score=final_score, risk_level=get_rula_risk_level(final_score))
    fields.update(effective_weight=effective_weight, weight_multiplier=multiplier,
                  is_weight_adjusted=True)

    return AdjustedRulaScore(**fields)


def calculate_weight_adjusted_reba(base_reba, weight_estimation, manual_weight=None):
    """
    Recalculate a REBA score for a handled load.

    Score A and Score B are each scaled, rounded half up and capped at 12,
    then the final score is looked up again in Table C. Any load/coupling
    and activity points on the base score are added back on top.
    """
    if base_reba is None:
        return None

    effective_weight = get_effective_weight(weight_estimation, manual_weight)
    multiplier = get_reba_weight_multiplier(effective_weight)

    score_a = min(12, round_half_up(base_reba.score_a * multiplier))
    score_b = min(12, round_half_up(base_reba.score_b * multiplier))

    # Load/coupling and activity points already folded into the base final score
    extra_points = base_reba.final_score - _reba_scorer.get_final_score(
        base_reba.score_a, base_reba.score_b)
    final_score = _reba_scorer.get_final_score(score_a, score_b, extra_points)

    logger.debug("REBA load adjustment: %.1f kg x%.1f -> A=%d B=%d final=%d",
                 effective_weight, multiplier, score_a, score_b, final_score)

    fields = asdict(base_reba)
    fields.update(
        score_a=score_a,
        score_b=score_b,
        final_score=final_score,
        risk_level=get_reba_risk_level(final_score),
        action_level=get_reba_action_level(final_score),
        effective_weight=effective_weight,
        weight_multiplier=multiplier,
        is_weight_adjusted=True
    )

    return AdjustedRebaScore(**fields)


def total_manual_weight(manual_weights):
    """Total of the manually entered items, converted from grams to kg"""
    return sum(item.weight_grams for item in manual_weights) / 1000.0

"""RULA scoring implementation"""

import logging
import math

from angleCalculation import extract_all_angles, has_shoulders
from config import RULA_RISK_LEVELS, RULA_THRESHOLDS
from models import RulaAdjustments, RulaScore
from poseDetection import parse_keypoints
from utils import clamp

logger = logging.getLogger(__name__)

# RULA arm/leg angles always come from the right-side connections
RULA_SIDE = 'right'


def get_rula_risk_level(final_score):
    """Determine risk level from RULA score"""
    for upper, label in RULA_RISK_LEVELS:
        if final_score <= upper:
            return label
    return RULA_RISK_LEVELS[-1][1]


class RULAScorer:
    def __init__(self):
        self.table_a = self._create_table_a()
        self.table_b = self._create_table_b()
        self.table_final = self._create_final_table()

    def _create_table_a(self):
        """RULA Table A: Upper arm x Lower arm x Wrist (6 x 3 x 8)"""
        return (
            ((1, 2, 2, 2, 2, 3, 3, 3), (2, 2, 2, 2, 3, 3, 3, 3), (2, 3, 3, 3, 3, 3, 4, 4)),
            ((2, 2, 2, 2, 3, 3, 3, 3), (2, 2, 2, 2, 3, 3, 3, 3), (3, 3, 3, 3, 3, 4, 4, 4)),
            ((2, 3, 3, 3, 3, 4, 4, 4), (3, 3, 3, 3, 3, 4, 4, 4), (3, 4, 4, 4, 4, 4, 5, 5)),
            ((3, 3, 3, 4, 4, 4, 5, 5), (3, 3, 4, 4, 4, 4, 5, 5), (4, 4, 4, 4, 5, 5, 5, 6)),
            ((4, 4, 4, 4, 4, 5, 5, 5), (4, 4, 4, 4, 4, 5, 5, 5), (4, 4, 4, 5, 5, 5, 6, 6)),
            ((6, 6, 6, 6, 6, 7, 7, 7), (6, 6, 6, 6, 6, 7, 7, 7), (6, 6, 7, 7, 7, 7, 7, 8))
        )

    def _create_table_b(self):
        """RULA Table B: Neck x Trunk (6 x 6)"""
        return (
            (1, 2, 3, 3, 4, 5),
            (2, 2, 3, 4, 5, 5),
            (3, 3, 3, 4, 5, 6),
            (3, 3, 4, 4, 5, 6),
            (4, 5, 5, 5, 6, 7),
            (4, 5, 5, 6, 6, 7)
        )

    def _create_final_table(self):
        """RULA Table C: Score A x Score B (8 x 7)"""
        return (
            (1, 1, 1, 2, 3, 3, 4),
            (1, 2, 2, 3, 3, 3, 4),
            (2, 2, 2, 3, 3, 3, 4),
            (3, 3, 3, 3, 3, 4, 4),
            (4, 4, 4, 4, 4, 4, 5),
            (4, 4, 4, 4, 4, 4, 5),
            (5, 5, 5, 5, 5, 5, 6),
            (5, 5, 5, 5, 5, 6, 6)
        )

    def get_upper_arm_score(self, upper_arm_angle, shoulder_raised=False,
                            arm_abducted=False, arm_supported=False):
        """Get upper arm score (1-6) from flexion away from the trunk"""
        low, mid, high = RULA_THRESHOLDS['upper_arm']
        abs_angle = abs(upper_arm_angle)

        if abs_angle < low:
            score = 1
        elif abs_angle < mid:
            score = 2
        elif abs_angle < high:
            score = 3
        else:
            score = 4

        if shoulder_raised:
            score += 1
        if arm_abducted:
            score += 1
        if arm_supported:
            score -= 1

        return clamp(score, 1, 6)

    def get_lower_arm_score(self, lower_arm_angle, across_midline=False):
        """Get lower arm score; 60-100 degrees of elbow flexion is neutral"""
        low, high = RULA_THRESHOLDS['lower_arm_neutral']
        score = 1 if low <= lower_arm_angle <= high else 2

        if across_midline:
            score += 1

        return clamp(score, 1, 3)

    def get_wrist_score(self, wrist_angle, wrist_deviated=False):
        """Get wrist score from flexion/extension magnitude"""
        neutral, moderate = RULA_THRESHOLDS['wrist']
        abs_angle = abs(wrist_angle)

        if abs_angle <= neutral:
            score = 1
        elif abs_angle <= moderate:
            score = 2
        else:
            score = 3

        if wrist_deviated:
            score += 1

        return clamp(score, 1, 4)

    def get_neck_score(self, neck_angle, neck_twisted=False):
        low, high = RULA_THRESHOLDS['neck']
        abs_angle = abs(neck_angle)

        if abs_angle <= low:
            score = 1
        elif abs_angle <= high:
            score = 2
        else:
            score = 3

        if neck_twisted:
            score += 1

        return clamp(score, 1, 4)

    def get_trunk_score(self, trunk_angle, trunk_twisted=False):
        upright, slight, flexed = RULA_THRESHOLDS['trunk']
        abs_angle = abs(trunk_angle)

        if abs_angle < upright:
            score = 1
        elif abs_angle < slight:
            score = 2
        elif abs_angle < flexed:
            score = 3
        else:
            score = 4

        if trunk_twisted:
            score += 1

        return clamp(score, 1, 4)

    def get_score_a(self, upper_arm, lower_arm, wrist):
        """Table A lookup, out-of-range component scores are clamped"""
        upper_arm_idx = clamp(upper_arm - 1, 0, 5)
        lower_arm_idx = clamp(lower_arm - 1, 0, 2)
        wrist_idx = clamp(wrist - 1, 0, 7)
        return self.table_a[upper_arm_idx][lower_arm_idx][wrist_idx]

    def get_score_b(self, neck, trunk):
        neck_idx = clamp(neck - 1, 0, 5)
        trunk_idx = clamp(trunk - 1, 0, 5)
        return self.table_b[neck_idx][trunk_idx]

    def get_final_score(self, score_a, score_b):
        score_a_idx = clamp(score_a - 1, 0, 7)
        score_b_idx = clamp(score_b - 1, 0, 6)
        return clamp(self.table_final[score_a_idx][score_b_idx], 1, 7)

    def calculate_rula_score(self, keypoints, adjustments=None):
        """
        Calculate the RULA score for one frame.

        Args:
            keypoints: 17 COCO keypoints (Keypoint objects, dicts or rows)
            adjustments: optional RulaAdjustments for modifiers the
                keypoints can't show

        Returns:
            RulaScore, or None if the pose is insufficient for assessment
        """
        keypoints = parse_keypoints(keypoints)
        if keypoints is None:
            logger.debug("RULA skipped: fewer than 17 keypoints")
            return None

        if not has_shoulders(keypoints):
            logger.debug("RULA skipped: no shoulder detected")
            return None

        if adjustments is None:
            adjustments = RulaAdjustments()

        angles = extract_all_angles(keypoints, RULA_SIDE)

        upper_arm = self.get_upper_arm_score(
            angles['upper_arm'],
            shoulder_raised=adjustments.shoulder_raised,
            arm_abducted=adjustments.arm_abducted,
            arm_supported=adjustments.arm_supported
        )
        lower_arm = self.get_lower_arm_score(angles['lower_arm'], adjustments.across_midline)
        wrist = self.get_wrist_score(angles['wrist'], adjustments.wrist_deviated)
        neck = self.get_neck_score(angles['neck'], adjustments.neck_twisted)
        trunk = self.get_trunk_score(angles['trunk'], adjustments.trunk_twisted)

        score_a = self.get_score_a(upper_arm, lower_arm, wrist)
        score_b = self.get_score_b(neck, trunk)
        final_score = self.get_final_score(score_a, score_b)

        return RulaScore(
            upper_arm=upper_arm,
            lower_arm=lower_arm,
            wrist=wrist,
            neck=neck,
            trunk=trunk,
            score_a=score_a,
            score_b=score_b,
            final_score=final_score,
            risk_level=get_rula_risk_level(final_score),
            upper_arm_angle=round(angles['upper_arm'], 1),
            lower_arm_angle=round(angles['lower_arm'], 1),
            wrist_angle=round(angles['wrist'], 1),
            # Signed so consumers can tell forward from backward lean
            neck_angle=round(angles['neck_lean'], 1),
            trunk_angle=round(angles['trunk_lean'], 1)
        )


def scale_final_score(final_score, multiplier):
    """Scale a RULA final score by a load multiplier, rounding up and capping at 7"""
    return min(7, int(math.ceil(final_score * multiplier)))

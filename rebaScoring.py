"""REBA scoring implementation"""

import logging

from angleCalculation import extract_all_angles, has_shoulders, select_side
from config import REBA_RISK_LEVELS, REBA_THRESHOLDS
from models import RebaAdjustments, RebaScore
from poseDetection import parse_keypoints
from utils import clamp

logger = logging.getLogger(__name__)


def _reba_band(score):
    for band in REBA_RISK_LEVELS:
        if score <= band[0]:
            return band
    return REBA_RISK_LEVELS[-1]


def get_reba_risk_level(score):
    """Determine risk level from REBA score"""
    return _reba_band(score)[1]


def get_reba_action_level(score):
    return _reba_band(score)[2]


class REBAScorer:
    def __init__(self):
        self.table_a = self._create_table_a()
        self.table_b = self._create_table_b()
        self.table_c = self._create_table_c()

    def _create_table_a(self):
        """
        REBA Table A, indexed [neck][legs] (5 x 4).

        The published Table A is three-dimensional (trunk x neck x legs).
        This table is the collapsed two-axis form the assessment was
        validated with: trunk is scored and reported but is not a lookup
        axis. Kept as-is until checked against the canonical table.
        """
        return (
            (1, 2, 3, 4),
            (2, 3, 4, 5),
            (2, 4, 5, 6),
            (3, 5, 6, 7),
            (4, 6, 7, 8)
        )

    def _create_table_b(self):
        """
        REBA Table B, indexed [upper arm][wrist] (6 x 3).

        Same caveat as Table A: lower arm is scored but is not a lookup axis.
        """
        return (
            (1, 2, 2),
            (1, 2, 3),
            (3, 4, 5),
            (4, 5, 6),
            (6, 7, 8),
            (7, 8, 9)
        )

    def _create_table_c(self):
        """REBA Table C: Score A x Score B (12 x 12)"""
        return (
            (1, 1, 1, 2, 3, 3, 4, 5, 6, 7, 7, 7),
            (1, 2, 2, 3, 4, 4, 5, 6, 6, 7, 7, 8),
            (2, 3, 3, 3, 4, 5, 6, 7, 7, 8, 8, 8),
            (3, 4, 4, 4, 5, 6, 7, 8, 8, 9, 9, 9),
            (4, 4, 4, 5, 6, 7, 8, 8, 9, 9, 9, 9),
            (6, 6, 6, 7, 8, 8, 9, 9, 10, 10, 10, 10),
            (7, 7, 7, 8, 9, 9, 9, 10, 10, 11, 11, 11),
            (8, 8, 8, 9, 10, 10, 10, 10, 10, 11, 11, 11),
            (9, 9, 9, 10, 10, 10, 11, 11, 11, 12, 12, 12),
            (10, 10, 10, 11, 11, 11, 11, 12, 12, 12, 12, 12),
            (11, 11, 11, 11, 12, 12, 12, 12, 12, 12, 12, 12),
            (12, 12, 12, 12, 12, 12, 12, 12, 12, 12, 12, 12)
        )

    def get_neck_score(self, neck_angle, neck_twisted=False):
        """Get neck score based on flexion angle"""
        if neck_angle < 0:
            # Extension
            score = 2
        elif neck_angle < REBA_THRESHOLDS['neck']:
            score = 1
        else:
            score = 2

        if neck_twisted:
            score += 1

        return min(3, score)

    def get_trunk_score(self, trunk_angle, trunk_twisted=False):
        """Get trunk score based on flexion angle"""
        upright, slight, flexed = REBA_THRESHOLDS['trunk']

        # 0-5 degrees = essentially upright
        if trunk_angle < upright:
            score = 1
        elif trunk_angle < slight:
            score = 2
        elif trunk_angle < flexed:
            score = 3
        else:
            score = 4

        if trunk_twisted:
            score += 1

        return min(5, score)

    def get_legs_score(self, knee_angle, legs_supported=True):
        """Get legs score from knee flexion and bilateral support"""
        score = 2 if knee_angle >= REBA_THRESHOLDS['knee_flexion'] else 1

        if not legs_supported:
            score += 1

        return min(4, score)

    def get_upper_arm_score(self, upper_arm_angle, shoulder_raised=False,
                            arm_abducted=False, arm_supported=False):
        """
        Get upper arm score.

        Keypoint scoring passes the unsigned deviation from the trunk line, so
        the extension band only applies to signed angles from direct callers.
        """
        low, mid, high = REBA_THRESHOLDS['upper_arm']

        if upper_arm_angle < REBA_THRESHOLDS['upper_arm_extension']:
            score = 2
        elif upper_arm_angle < low:
            score = 1
        elif upper_arm_angle < mid:
            score = 2
        elif upper_arm_angle < high:
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

    def get_lower_arm_score(self, lower_arm_angle):
        low, high = REBA_THRESHOLDS['lower_arm_neutral']
        return 1 if low <= lower_arm_angle <= high else 2

    def get_wrist_score(self, wrist_angle, wrist_twisted=False):
        score = 2 if abs(wrist_angle) > REBA_THRESHOLDS['wrist'] else 1

        if wrist_twisted:
            score += 1

        return min(3, score)

    def get_score_a(self, neck, trunk, legs):
        """Table A lookup. trunk is accepted but unused, see _create_table_a."""
        neck_idx = clamp(neck - 1, 0, 4)
        legs_idx = clamp(legs - 1, 0, 3)
        return self.table_a[neck_idx][legs_idx]

    def get_score_b(self, upper_arm, lower_arm, wrist):
        """Table B lookup. lower_arm is accepted but unused, see _create_table_b."""
        upper_arm_idx = clamp(upper_arm - 1, 0, 5)
        wrist_idx = clamp(wrist - 1, 0, 2)
        return self.table_b[upper_arm_idx][wrist_idx]

    def get_final_score(self, score_a, score_b, load_coupling=0, activity=0):
        """Table C lookup plus load/coupling and activity points, capped to 1-15"""
        score_a_idx = clamp(score_a - 1, 0, 11)
        score_b_idx = clamp(score_b - 1, 0, 11)

        final_score = self.table_c[score_a_idx][score_b_idx]
        final_score += load_coupling + activity

        return clamp(final_score, 1, 15)

    def calculate_reba_score(self, keypoints, adjustments=None):
        """
        Calculate the REBA score for one frame.

        Arm and leg angles come from the body side whose shoulder has the
        higher detection confidence.

        Returns:
            RebaScore, or None if the pose is insufficient for assessment
        """
        keypoints = parse_keypoints(keypoints)
        if keypoints is None:
            logger.debug("REBA skipped: fewer than 17 keypoints")
            return None

        if not has_shoulders(keypoints):
            logger.debug("REBA skipped: no shoulder detected")
            return None

        if adjustments is None:
            adjustments = RebaAdjustments()

        angles = extract_all_angles(keypoints, select_side(keypoints))
        knee_angle = angles['knee']
        if knee_angle is None:
            knee_angle = REBA_THRESHOLDS['default_knee_angle']

        # Calculate individual scores
        neck_score = self.get_neck_score(angles['neck'], adjustments.neck_twisted)
        trunk_score = self.get_trunk_score(angles['trunk'], adjustments.trunk_twisted)
        legs_score = self.get_legs_score(knee_angle, adjustments.legs_supported)
        upper_arm_score = self.get_upper_arm_score(
            angles['upper_arm'],
            shoulder_raised=adjustments.shoulder_raised,
            arm_abducted=adjustments.arm_abducted,
            arm_supported=adjustments.arm_supported
        )
        lower_arm_score = self.get_lower_arm_score(angles['lower_arm'])
        wrist_score = self.get_wrist_score(angles['wrist'], adjustments.wrist_twisted)

        # Look up table scores
        score_a = self.get_score_a(neck_score, trunk_score, legs_score)
        score_b = self.get_score_b(upper_arm_score, lower_arm_score, wrist_score)
        final_score = self.get_final_score(
            score_a, score_b, adjustments.load_coupling, adjustments.activity)

        return RebaScore(
            neck=neck_score,
            trunk=trunk_score,
            legs=legs_score,
            upper_arm=upper_arm_score,
            lower_arm=lower_arm_score,
            wrist=wrist_score,
            score_a=score_a,
            score_b=score_b,
            final_score=final_score,
            risk_level=get_reba_risk_level(final_score),
            action_level=get_reba_action_level(final_score),
            neck_angle=round(angles['neck'], 1),
            trunk_angle=round(angles['trunk'], 1),
            upper_arm_angle=round(angles['upper_arm'], 1),
            lower_arm_angle=round(angles['lower_arm'], 1),
            wrist_angle=round(angles['wrist'], 1),
            knee_angle=round(knee_angle, 1)
        )

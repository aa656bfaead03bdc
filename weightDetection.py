"""
Posture-based estimation of an external load.

The estimate is a heuristic read from arm extension, wrist placement and
forward lean. It is approximate and should not be treated as a measured
weight; callers that know the real load should pass it to the weight
adjustment functions instead.
"""

import logging

from angleCalculation import calculate_elbow_angle, is_present, midpoint
from config import COCO_KEYPOINTS, KEYPOINT_CONFIG, WEIGHT_DETECTION_CONFIG
from models import PostureAnalysis, WeightEstimation
from poseDetection import parse_keypoints

logger = logging.getLogger(__name__)

ARM_KEYPOINTS = (
    'left_shoulder', 'right_shoulder',
    'left_elbow', 'right_elbow',
    'left_wrist', 'right_wrist'
)


def _arm_keypoints(keypoints):
    """Arm keypoints by name, or None if the pose can't be analysed"""
    if keypoints is None or len(keypoints) < KEYPOINT_CONFIG['num_keypoints']:
        return None

    arms = {name: keypoints[COCO_KEYPOINTS[name]] for name in ARM_KEYPOINTS}
    if not all(is_present(kp) for kp in arms.values()):
        return None
    return arms


def _elbow_angles(arms):
    left = calculate_elbow_angle(arms['left_shoulder'], arms['left_elbow'], arms['left_wrist'])
    right = calculate_elbow_angle(arms['right_shoulder'], arms['right_elbow'], arms['right_wrist'])
    return left, right


def analyze_posture(keypoints) -> PostureAnalysis:
    """
    Classify whether the subject appears to be lifting or carrying something.

    Args:
        keypoints: 17 COCO keypoints

    Returns:
        PostureAnalysis; all flags false if the arms can't be seen
    """
    parsed = parse_keypoints(keypoints)
    arms = _arm_keypoints(parsed)
    if arms is None:
        return PostureAnalysis()

    is_lifting = False
    is_carrying = False
    arm_position = 'close'
    spine_deviation = 0.0

    low, high = WEIGHT_DETECTION_CONFIG['extended_elbow_range']
    away = WEIGHT_DETECTION_CONFIG['wrist_away_threshold']
    overhead = WEIGHT_DETECTION_CONFIG['overhead_threshold']

    left_angle, right_angle = _elbow_angles(arms)
    left_extended = low < left_angle < high
    right_extended = low < right_angle < high

    # Wrists held away from the body suggest something is being held
    left_away = abs(arms['left_wrist'].x - arms['left_shoulder'].x) > away
    right_away = abs(arms['right_wrist'].x - arms['right_shoulder'].x) > away

    if (left_extended and left_away) or (right_extended and right_away):
        is_carrying = True
        arm_position = 'extended'

    # Both arms engaged
    if left_extended and right_extended and (left_away or right_away):
        is_lifting = True
        arm_position = 'extended'

    if (arms['left_wrist'].y < arms['left_shoulder'].y - overhead
            or arms['right_wrist'].y < arms['right_shoulder'].y - overhead):
        arm_position = 'overhead'
        is_lifting = True

    left_hip = parsed[COCO_KEYPOINTS['left_hip']]
    right_hip = parsed[COCO_KEYPOINTS['right_hip']]
    if is_present(left_hip) and is_present(right_hip):
        hip_center = midpoint(left_hip, right_hip)
        shoulder_center = midpoint(arms['left_shoulder'], arms['right_shoulder'])
        spine_deviation = abs(shoulder_center.x - hip_center.x) * 100

    return PostureAnalysis(
        is_lifting=is_lifting,
        is_carrying=is_carrying,
        arm_position=arm_position,
        spine_deviation=spine_deviation,
        load_direction='front'
    )


def calculate_weight_from_posture(posture, keypoints):
    """Conservative load estimate in kg for a confirmed lifting/carrying posture"""
    config = WEIGHT_DETECTION_CONFIG

    if posture.is_lifting and posture.arm_position == 'extended':
        base_weight = config['lifting_weight']
    elif posture.is_carrying and posture.arm_position == 'extended':
        base_weight = config['carrying_weight']
    elif posture.arm_position == 'overhead':
        base_weight = config['overhead_weight']
    else:
        base_weight = 0

    arms = _arm_keypoints(parse_keypoints(keypoints))
    if base_weight > 0 and arms is not None:
        # Asymmetric arms suggest a one-sided external load
        left_angle, right_angle = _elbow_angles(arms)
        if abs(left_angle - right_angle) > config['asymmetry_threshold']:
            base_weight += config['asymmetry_bonus']

        shoulder_center = midpoint(arms['left_shoulder'], arms['right_shoulder'])
        wrist_center = midpoint(arms['left_wrist'], arms['right_wrist'])
        if wrist_center.y > shoulder_center.y + config['forward_lean_threshold']:
            base_weight += config['forward_lean_bonus']

    return base_weight


def estimate_weight_from_posture(keypoints) -> WeightEstimation:
    """Estimate the external load for one frame"""
    posture = analyze_posture(keypoints)

    # Only report a weight while something appears to be held
    if not (posture.is_lifting or posture.is_carrying):
        return WeightEstimation(
            estimated_weight=0.0,
            confidence=WEIGHT_DETECTION_CONFIG['idle_confidence'],
            body_posture=posture
        )

    estimated_weight = float(calculate_weight_from_posture(posture, keypoints))
    logger.debug("Estimated load %.1f kg (%s)", estimated_weight, posture.arm_position)

    return WeightEstimation(
        estimated_weight=estimated_weight,
        confidence=WEIGHT_DETECTION_CONFIG['holding_confidence'],
        detected_objects=(),
        body_posture=posture
    )

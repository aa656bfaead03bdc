"""Joint angle calculations from 2D keypoints"""

import math

import numpy as np

from config import COCO_KEYPOINTS, KEYPOINT_CONFIG
from models import Keypoint


def is_present(keypoint):
    """A keypoint counts only if it was detected above the confidence threshold"""
    return keypoint is not None and keypoint.score > KEYPOINT_CONFIG['min_confidence']


def _xy(keypoint):
    return np.array([keypoint.x, keypoint.y], dtype=float)


def normalize_angle(angle):
    """Wrap an angle in degrees into (-180, 180]"""
    angle = math.fmod(angle, 360.0)
    if angle > 180.0:
        angle -= 360.0
    elif angle <= -180.0:
        angle += 360.0
    return angle


def calculate_elbow_angle(proximal, mid, distal):
    """
    Calculate the joint angle at the mid point (e.g. shoulder, elbow, wrist)

    A straight limb gives 180 degrees. If either segment has zero length
    the angle is undefined and 90 degrees is returned instead.
    """
    # Segment vectors along the limb
    v1 = _xy(mid) - _xy(proximal)
    v2 = _xy(distal) - _xy(mid)

    norm_product = np.linalg.norm(v1) * np.linalg.norm(v2)
    with np.errstate(divide='ignore', invalid='ignore'):
        cosine_angle = np.dot(v1, v2) / norm_product

    if not np.isfinite(cosine_angle):
        return 90.0

    # Handle numerical errors
    cosine_angle = np.clip(cosine_angle, -1.0, 1.0)

    # Deviation from a straight limb, converted to the interior angle
    deviation = np.degrees(np.arccos(cosine_angle))
    return float(180.0 - deviation)


def segment_angle(start, end, offset=0.0):
    """Direction of the start->end segment in image coordinates (degrees), plus offset"""
    angle = math.degrees(math.atan2(end.y - start.y, end.x - start.x))
    return normalize_angle(angle + offset)


def vertical_deviation(start, end, reference='down'):
    """
    Angle between the start->end segment and the vertical, 0-180 degrees.

    reference='down' measures hanging segments (upper arm, thigh),
    reference='up' measures rising segments (neck, trunk).
    Image y grows downwards, so straight down is +90 and straight up is -90.
    """
    if reference == 'down':
        offset = -90.0
    elif reference == 'up':
        offset = 90.0
    else:
        raise ValueError(f"Unknown reference {reference!r}")

    return abs(segment_angle(start, end, offset))


def signed_lean(start, end):
    """Signed deviation of start->end from straight up, positive towards +x"""
    return segment_angle(start, end, 90.0)


def relative_segment_angle(a_start, a_end, b_start, b_end):
    """Angle between the directions of two segments, 0-180 degrees"""
    angle = segment_angle(b_start, b_end) - segment_angle(a_start, a_end)
    return abs(normalize_angle(angle))


def midpoint(a, b):
    """Midpoint of two keypoints, falling back to whichever one is present"""
    a_ok, b_ok = is_present(a), is_present(b)
    if a_ok and b_ok:
        return Keypoint((a.x + b.x) / 2, (a.y + b.y) / 2, min(a.score, b.score))
    if a_ok:
        return a
    if b_ok:
        return b
    return None


def body_center(a, b):
    """Midpoint of a left/right pair, None unless both are present"""
    if is_present(a) and is_present(b):
        return midpoint(a, b)
    return None


def select_side(keypoints):
    """Pick the body side whose shoulder was detected with higher confidence"""
    left = keypoints[COCO_KEYPOINTS['left_shoulder']]
    right = keypoints[COCO_KEYPOINTS['right_shoulder']]
    left_score = left.score if left is not None else 0
    right_score = right.score if right is not None else 0
    return 'left' if left_score > right_score else 'right'


def get_side_keypoints(keypoints, side):
    """Shoulder, elbow, wrist, hip, knee and ankle for one body side"""
    names = ('shoulder', 'elbow', 'wrist', 'hip', 'knee', 'ankle')
    return {name: keypoints[COCO_KEYPOINTS[f'{side}_{name}']] for name in names}


def has_shoulders(keypoints):
    return (is_present(keypoints[COCO_KEYPOINTS['left_shoulder']])
            or is_present(keypoints[COCO_KEYPOINTS['right_shoulder']]))


def _angle_or_default(func, points, default, *args):
    if all(is_present(p) for p in points):
        return func(*points, *args)
    return default


def extract_all_angles(keypoints, side):
    """
    Extract the joint angles both assessments use.

    Args:
        keypoints: 17 parsed keypoints
        side: 'left' or 'right' limb set for arm/leg angles

    Absent joints give a neutral default (0 degrees, wrist 15, knee None).
    Neck and trunk fall back to 0 unless both shoulders (and both hips for
    the trunk) are present.
    """
    limb = get_side_keypoints(keypoints, side)
    nose = keypoints[COCO_KEYPOINTS['nose']]
    shoulder_mid = body_center(keypoints[COCO_KEYPOINTS['left_shoulder']],
                               keypoints[COCO_KEYPOINTS['right_shoulder']])
    hip_mid = body_center(keypoints[COCO_KEYPOINTS['left_hip']],
                          keypoints[COCO_KEYPOINTS['right_hip']])

    angles = {
        'neck': _angle_or_default(vertical_deviation, (shoulder_mid, nose), 0.0, 'up'),
        'neck_lean': _angle_or_default(signed_lean, (shoulder_mid, nose), 0.0),
        'trunk': _angle_or_default(vertical_deviation, (hip_mid, shoulder_mid), 0.0, 'up'),
        'trunk_lean': _angle_or_default(signed_lean, (hip_mid, shoulder_mid), 0.0),
        'upper_arm': _angle_or_default(
            vertical_deviation, (limb['shoulder'], limb['elbow']), 0.0, 'down'),
        'lower_arm': _angle_or_default(
            relative_segment_angle,
            (limb['shoulder'], limb['elbow'], limb['elbow'], limb['wrist']), 0.0),
        'wrist': KEYPOINT_CONFIG['default_wrist_angle'],
        'knee': None
    }

    if all(is_present(limb[name]) for name in ('hip', 'knee', 'ankle')):
        # Flexion at the knee: 0 for a straight leg
        angles['knee'] = 180.0 - calculate_elbow_angle(limb['hip'], limb['knee'], limb['ankle'])

    return angles

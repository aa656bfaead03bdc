"""Keypoint input handling for pose-estimation output"""

import logging
import math
from collections.abc import Mapping, Sequence

import numpy as np

from config import BLAZEPOSE_TO_COCO, KEYPOINT_CONFIG
from models import Keypoint, PoseQuality
from utils import round_half_up

logger = logging.getLogger(__name__)

ABSENT = Keypoint(0.0, 0.0, 0.0)


def _to_float(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _parse_keypoint(raw):
    """Convert one raw keypoint to a Keypoint, malformed entries become absent"""
    if isinstance(raw, Keypoint):
        x, y, score = raw.x, raw.y, raw.score
    elif isinstance(raw, Mapping):
        x, y = raw.get('x'), raw.get('y')
        score = raw.get('score', raw.get('confidence', raw.get('visibility', 0.0)))
    elif isinstance(raw, (Sequence, np.ndarray)) and not isinstance(raw, str) and len(raw) >= 2:
        x, y = raw[0], raw[1]
        score = raw[2] if len(raw) >= 3 else 1.0
    else:
        return ABSENT

    x, y, score = _to_float(x), _to_float(y), _to_float(score)
    if x is None or y is None or score is None:
        return ABSENT

    return Keypoint(x, y, min(1.0, max(0.0, score)))


def parse_keypoints(raw_keypoints):
    """
    Validate a frame's keypoints and normalise them to 17 Keypoint objects.

    Args:
        raw_keypoints: sequence of Keypoint, dicts with x/y/score, or
            (x, y[, score]) rows (lists, tuples or a numpy array)

    Returns:
        Tuple of 17 Keypoints in COCO order, or None when fewer than 17
        entries are given. Entries past the 17th are ignored.
    """
    if raw_keypoints is None:
        return None

    if isinstance(raw_keypoints, np.ndarray):
        if raw_keypoints.ndim != 2:
            return None
    elif not isinstance(raw_keypoints, Sequence) or isinstance(raw_keypoints, str):
        return None

    num_keypoints = KEYPOINT_CONFIG['num_keypoints']
    if len(raw_keypoints) < num_keypoints:
        logger.debug("Expected %d keypoints, got %d", num_keypoints, len(raw_keypoints))
        return None

    return tuple(_parse_keypoint(raw_keypoints[i]) for i in range(num_keypoints))


def blazepose_to_coco(landmarks):
    """
    Convert MediaPipe BlazePose landmarks to the COCO 17-keypoint layout.

    Args:
        landmarks: array of 33 rows [x, y, z, visibility]

    Returns:
        Tuple of 17 Keypoints, or None if landmarks are missing
    """
    if landmarks is None:
        return None

    landmarks = np.asarray(landmarks, dtype=float)
    if landmarks.ndim != 2 or landmarks.shape[0] < 33 or landmarks.shape[1] < 2:
        return None

    keypoints = []
    for index in BLAZEPOSE_TO_COCO:
        row = landmarks[index]
        visibility = row[3] if row.shape[0] >= 4 else 1.0
        keypoints.append(_parse_keypoint((row[0], row[1], visibility)))

    return tuple(keypoints)


def count_valid_keypoints(raw_keypoints):
    """Count keypoints whose confidence is above the presence threshold"""
    if raw_keypoints is None or len(raw_keypoints) == 0:
        return 0
    threshold = KEYPOINT_CONFIG['min_confidence']
    return sum(1 for raw in raw_keypoints if _parse_keypoint(raw).score > threshold)


def calculate_pose_quality(raw_keypoints):
    """Summarise how many keypoints were detected with usable confidence"""
    total = 0 if raw_keypoints is None else len(raw_keypoints)
    valid = count_valid_keypoints(raw_keypoints)
    confidence = round_half_up(valid / KEYPOINT_CONFIG['num_keypoints'] * 100)
    return PoseQuality(total_keypoints=total, valid_keypoints=valid, confidence=confidence)

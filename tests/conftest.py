import numpy as np
import pytest

from config import COCO_KEYPOINTS

# Upright standing pose facing the camera, normalised image coordinates (y down)
NEUTRAL_POINTS = {
    'nose': (0.50, 0.10),
    'left_eye': (0.52, 0.08),
    'right_eye': (0.48, 0.08),
    'left_ear': (0.54, 0.09),
    'right_ear': (0.46, 0.09),
    'left_shoulder': (0.60, 0.25),
    'right_shoulder': (0.40, 0.25),
    'left_elbow': (0.60, 0.40),
    'right_elbow': (0.40, 0.40),
    'left_wrist': (0.60, 0.55),
    'right_wrist': (0.40, 0.55),
    'left_hip': (0.57, 0.55),
    'right_hip': (0.43, 0.55),
    'left_knee': (0.57, 0.75),
    'right_knee': (0.43, 0.75),
    'left_ankle': (0.57, 0.95),
    'right_ankle': (0.43, 0.95),
}


def build_pose(overrides=None, score=0.9):
    """17 keypoint dicts in COCO order; overrides map a name to (x, y) or (x, y, score)"""
    points = dict(NEUTRAL_POINTS)
    points.update(overrides or {})

    keypoints = [None] * len(COCO_KEYPOINTS)
    for name, index in COCO_KEYPOINTS.items():
        point = points[name]
        keypoint_score = point[2] if len(point) > 2 else score
        keypoints[index] = {'x': point[0], 'y': point[1], 'score': keypoint_score}
    return keypoints


@pytest.fixture
def make_pose():
    return build_pose


@pytest.fixture
def neutral_pose():
    return build_pose()


@pytest.fixture
def overhead_pose():
    """Both arms raised straight up"""
    return build_pose({
        'left_elbow': (0.60, 0.12),
        'right_elbow': (0.40, 0.12),
        'left_wrist': (0.60, 0.00),
        'right_wrist': (0.40, 0.00),
    })


@pytest.fixture
def lifting_pose():
    """Both elbows bent about 45 degrees with the hands held out and low"""
    return build_pose({
        'left_elbow': (0.65, 0.40),
        'right_elbow': (0.35, 0.40),
        'left_wrist': (0.75, 0.45),
        'right_wrist': (0.25, 0.45),
    })


@pytest.fixture
def forward_head_pose():
    """Head pushed 45 degrees forward of the shoulders"""
    return build_pose({
        'nose': (0.40, 0.15),
        'left_eye': (0.42, 0.13),
        'right_eye': (0.38, 0.13),
    })


def _scaled_pose(scale):
    return [{'x': kp['x'] * scale, 'y': kp['y'] * scale, 'score': kp['score']} for kp in build_pose()]


def _random_pose(seed):
    rng = np.random.default_rng(seed)
    coords = rng.uniform(-2.0, 3.0, size=(17, 2))
    scores = rng.uniform(0.0, 1.0, size=17)
    # Keep one shoulder visible so the pose is always scorable
    scores[6] = 0.9
    return [{'x': x, 'y': y, 'score': s} for (x, y), s in zip(coords, scores)]


EXTREME_POSES = {
    'coincident': lambda: [{'x': 0.5, 'y': 0.5, 'score': 0.9}] * 17,
    'inverted': lambda: [{'x': kp['x'], 'y': 1.0 - kp['y'], 'score': kp['score']} for kp in build_pose()],
    'pixels': lambda: _scaled_pose(640),
    'huge': lambda: _scaled_pose(1e6),
    'negative': lambda: _scaled_pose(-3),
    'limbs_crossed': lambda: build_pose({
        'right_elbow': (0.70, 0.05),
        'right_wrist': (0.20, 0.90),
        'right_knee': (0.43, 0.30),
        'right_ankle': (0.43, 0.55),
    }),
    'non_finite_limbs': lambda: build_pose({
        'right_elbow': (float('nan'), 0.40),
        'right_knee': (0.43, float('inf')),
    }),
}
EXTREME_POSES.update({f'random_{seed}': (lambda seed=seed: _random_pose(seed)) for seed in range(8)})


@pytest.fixture(params=sorted(EXTREME_POSES))
def extreme_pose(request):
    """Degenerate, inverted, badly scaled or random 17-keypoint poses"""
    return EXTREME_POSES[request.param]()

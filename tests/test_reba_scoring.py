import itertools

import pytest

from models import RebaAdjustments
from rebaScoring import REBAScorer, get_reba_action_level, get_reba_risk_level


@pytest.fixture
def scorer():
    return REBAScorer()


def test_table_shapes(scorer):
    assert len(scorer.table_a) == 5 and all(len(row) == 4 for row in scorer.table_a)
    assert len(scorer.table_b) == 6 and all(len(row) == 3 for row in scorer.table_b)
    assert len(scorer.table_c) == 12 and all(len(row) == 12 for row in scorer.table_c)


def test_neutral_pose(scorer, neutral_pose):
    result = scorer.calculate_reba_score(neutral_pose)

    assert result.neck == 1
    assert result.trunk == 1
    assert result.legs == 1
    assert result.upper_arm == 1
    assert result.final_score in (1, 2, 3)
    assert result.risk_level in ('Negligible', 'Low')


def test_neutral_pose_exact(scorer, neutral_pose):
    result = scorer.calculate_reba_score(neutral_pose)

    assert (result.score_a, result.score_b, result.final_score) == (1, 1, 1)
    assert result.risk_level == 'Negligible'
    assert result.action_level == 'None necessary'


def test_bent_knees_score_legs(scorer, make_pose):
    # Right knee pushed forward, roughly 45 degrees of flexion
    pose = make_pose({'right_knee': (0.53, 0.72), 'right_ankle': (0.43, 0.90)})
    result = scorer.calculate_reba_score(pose)

    assert result.knee_angle > 30
    assert result.legs == 2


def test_missing_knee_uses_default_flexion(scorer, make_pose):
    pose = make_pose({'right_knee': (0.43, 0.75, 0.0)})
    result = scorer.calculate_reba_score(pose)

    assert result.knee_angle == 30.0
    assert result.legs == 2


def test_side_selection_follows_shoulder_confidence(scorer, make_pose):
    left_arm_out = {
        'left_elbow': (0.75, 0.25),
        'left_wrist': (0.90, 0.25),
    }

    left_pose = make_pose(dict(left_arm_out, left_shoulder=(0.60, 0.25, 0.95)))
    right_pose = make_pose(dict(left_arm_out, right_shoulder=(0.40, 0.25, 0.95)))

    assert scorer.calculate_reba_score(left_pose).upper_arm == 4
    assert scorer.calculate_reba_score(right_pose).upper_arm == 1


def test_adjustments(scorer, neutral_pose):
    result = scorer.calculate_reba_score(neutral_pose, RebaAdjustments(
        neck_twisted=True, trunk_twisted=True, legs_supported=False, wrist_twisted=True))

    assert result.neck == 2
    assert result.trunk == 2
    assert result.legs == 2
    assert result.wrist == 2


def test_load_and_activity_points(scorer):
    base = scorer.get_final_score(4, 3)
    assert scorer.get_final_score(4, 3, load_coupling=2, activity=1) == base + 3
    assert scorer.get_final_score(12, 12, load_coupling=3, activity=3) == 15


@pytest.mark.parametrize("angle,expected", [(-5, 2), (0, 1), (19.9, 1), (20, 2), (60, 2)])
def test_neck_bands(scorer, angle, expected):
    assert scorer.get_neck_score(angle) == expected


def test_neck_score_is_capped(scorer):
    assert scorer.get_neck_score(40, neck_twisted=True) == 3


@pytest.mark.parametrize("angle,expected", [(0, 1), (5, 2), (19, 2), (20, 3), (60, 4), (120, 4)])
def test_trunk_bands(scorer, angle, expected):
    assert scorer.get_trunk_score(angle) == expected


def test_trunk_score_is_capped(scorer):
    assert scorer.get_trunk_score(90, trunk_twisted=True) == 5


@pytest.mark.parametrize("angle,expected", [(-30, 2), (-20, 1), (0, 1), (20, 2), (45, 3), (90, 4), (180, 4)])
def test_upper_arm_bands(scorer, angle, expected):
    assert scorer.get_upper_arm_score(angle) == expected


def test_upper_arm_clamped(scorer):
    assert scorer.get_upper_arm_score(0, arm_supported=True) == 1
    assert scorer.get_upper_arm_score(120, shoulder_raised=True, arm_abducted=True) == 6


@pytest.mark.parametrize("angle,expected", [(59, 2), (60, 1), (100, 1), (101, 2)])
def test_lower_arm_bands(scorer, angle, expected):
    assert scorer.get_lower_arm_score(angle) == expected


@pytest.mark.parametrize("angle,expected", [(0, 1), (15, 1), (16, 2), (-16, 2)])
def test_wrist_bands(scorer, angle, expected):
    assert scorer.get_wrist_score(angle) == expected


def test_legs_score(scorer):
    assert scorer.get_legs_score(10) == 1
    assert scorer.get_legs_score(30) == 2
    assert scorer.get_legs_score(60, legs_supported=False) == 3


def test_score_a_ignores_trunk(scorer):
    for neck, legs in itertools.product(range(1, 4), range(1, 5)):
        scores = {scorer.get_score_a(neck, trunk, legs) for trunk in range(1, 6)}
        assert len(scores) == 1


def test_score_b_ignores_lower_arm(scorer):
    for upper_arm, wrist in itertools.product(range(1, 7), range(1, 4)):
        scores = {scorer.get_score_b(upper_arm, lower_arm, wrist) for lower_arm in (1, 2)}
        assert len(scores) == 1


def test_lookups_clamp_out_of_range_indices(scorer):
    assert scorer.get_score_a(9, 9, 9) == scorer.get_score_a(5, 1, 4)
    assert scorer.get_score_a(0, 0, 0) == 1
    assert scorer.get_score_b(9, 1, 9) == scorer.get_score_b(6, 1, 3)
    assert scorer.get_final_score(20, 20) == 12


def test_final_score_always_in_range(scorer):
    for neck, trunk, legs, upper_arm, wrist in itertools.product(
            range(1, 4), range(1, 6), range(1, 5), range(1, 7), range(1, 4)):
        score_a = scorer.get_score_a(neck, trunk, legs)
        score_b = scorer.get_score_b(upper_arm, 1, wrist)
        assert 1 <= scorer.get_final_score(score_a, score_b) <= 15


@pytest.mark.parametrize("bad_input", [None, [], [{'x': 0.5, 'y': 0.5, 'score': 0.9}] * 16])
def test_insufficient_input(scorer, bad_input):
    assert scorer.calculate_reba_score(bad_input) is None


def test_missing_shoulders(scorer, make_pose):
    pose = make_pose({
        'left_shoulder': (0.6, 0.25, 0.0),
        'right_shoulder': (0.4, 0.25, 0.0),
    })
    assert scorer.calculate_reba_score(pose) is None


@pytest.mark.parametrize("score,risk,action", [
    (1, 'Negligible', 'None necessary'),
    (2, 'Low', 'May be necessary'),
    (3, 'Low', 'May be necessary'),
    (4, 'Medium', 'Necessary'),
    (7, 'Medium', 'Necessary'),
    (8, 'High', 'Necessary soon'),
    (10, 'High', 'Necessary soon'),
    (11, 'Very High', 'Necessary now'),
    (15, 'Very High', 'Necessary now'),
])
def test_risk_and_action_levels(score, risk, action):
    assert get_reba_risk_level(score) == risk
    assert get_reba_action_level(score) == action


def test_one_occluded_shoulder_keeps_neutral_neck_and_trunk(scorer, make_pose):
    result = scorer.calculate_reba_score(make_pose({'left_shoulder': (0.60, 0.25, 0.1)}))

    assert (result.neck, result.trunk) == (1, 1)
    assert (result.neck_angle, result.trunk_angle) == (0.0, 0.0)


@pytest.mark.parametrize("adjustments", [None, RebaAdjustments(load_coupling=3, activity=3)])
def test_extreme_poses_stay_in_range(scorer, extreme_pose, adjustments):
    result = scorer.calculate_reba_score(extreme_pose, adjustments)

    assert 1 <= result.final_score <= 15
    assert result.action_level == get_reba_action_level(result.final_score)

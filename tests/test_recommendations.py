import pytest

from models import RebaScore, RulaScore
from recommendations import PRIORITY_ORDER, RecommendationEngine, RecommendationSession


def make_rula(final_score=1, upper_arm=1, wrist=1, neck=1, score_a=1, score_b=1, neck_angle=0.0):
    return RulaScore(upper_arm=upper_arm, lower_arm=1, wrist=wrist, neck=neck, trunk=1,
                     score_a=score_a, score_b=score_b, final_score=final_score,
                     risk_level='Acceptable', neck_angle=neck_angle)


def make_reba(final_score=1, trunk=1, legs=1):
    return RebaScore(neck=1, trunk=trunk, legs=legs, upper_arm=1, lower_arm=1, wrist=1,
                     score_a=1, score_b=1, final_score=final_score,
                     risk_level='Negligible', action_level='None necessary')


@pytest.fixture
def engine():
    return RecommendationEngine()


@pytest.fixture
def session():
    return RecommendationSession()


def ids(recommendations):
    return [rec.id for rec in recommendations]


def test_low_risk_gives_nothing(engine, session, neutral_pose):
    assert engine.generate(session, make_rula(), make_reba(), neutral_pose, now=0) == []


def test_at_most_two_sorted_by_priority(engine, session):
    rula = make_rula(final_score=7, upper_arm=3, wrist=4, neck=3, score_a=5, score_b=4)
    recommendations = engine.generate(session, rula=rula, now=0)

    assert len(recommendations) == 2
    priorities = [PRIORITY_ORDER[rec.priority] for rec in recommendations]
    assert priorities == sorted(priorities)
    assert all(rec.priority == 'critical' for rec in recommendations)


def test_rula_rules(engine, session):
    rula = make_rula(final_score=5, neck=3, neck_angle=25.0)
    recommendations = engine.generate(session, rula=rula, now=0)

    assert ids(recommendations) == ['rula-high-action', 'rula-neck-high']
    assert 'forward' in recommendations[1].description


def test_backward_neck(engine, session):
    recommendations = engine.generate(session, rula=make_rula(neck=3, neck_angle=-25.0), now=0)
    assert 'backward' in recommendations[0].description


def test_fatigue_advice(engine, session):
    arm = engine.generate(RecommendationSession(), rula=make_rula(score_a=5, score_b=2), now=0)
    neck = engine.generate(session, rula=make_rula(score_a=2, score_b=5), now=0)

    assert ids(arm) == ['rula-arm-fatigue']
    assert ids(neck) == ['rula-neck-fatigue']


def test_reba_rules(engine, session):
    recommendations = engine.generate(session, reba=make_reba(final_score=9, trunk=4, legs=2), now=0)

    assert ids(recommendations) == ['reba-trunk-high', 'reba-critical-overall']


def test_assessment_type_filters_scores(engine, session):
    rula = make_rula(final_score=7)
    reba = make_reba(final_score=9)

    assert ids(engine.generate(session, rula, reba, assessment_type='reba', now=0)) == ['reba-critical-overall']


def test_unknown_assessment_type(engine, session):
    with pytest.raises(ValueError):
        engine.generate(session, make_rula(), assessment_type='owas', now=0)


def test_throttled_within_interval(engine, session):
    first = engine.generate(session, rula=make_rula(final_score=7), now=0)

    # High risk: 3 s between updates
    assert engine.generate(session, rula=make_rula(final_score=5), now=2.5) == first
    assert ids(engine.generate(session, rula=make_rula(final_score=5), now=3.0)) == ['rula-high-action']


@pytest.mark.parametrize("session_duration,wait,refreshes", [
    (10, 7.9, False),
    (10, 8.0, True),
    (120, 14.0, False),
    (120, 15.0, True),
])
def test_throttle_intervals_without_high_risk(engine, session, session_duration, wait, refreshes):
    engine.generate(session, reba=make_reba(final_score=5), session_duration=session_duration, now=0)
    result = engine.generate(session, reba=make_reba(final_score=1), session_duration=session_duration, now=wait)

    assert (result == []) == refreshes


def test_shown_recommendation_hidden_for_ten_minutes(engine, session):
    rula = make_rula(final_score=7)
    session.mark_shown('rula-critical-immediate', now=0)

    assert engine.generate(session, rula=rula, now=0) == []
    assert engine.generate(session, rula=rula, now=300) == []
    assert ids(engine.generate(session, rula=rula, now=600)) == ['rula-critical-immediate']


def test_clear_resets_session(engine, session):
    rula = make_rula(final_score=7)
    session.mark_shown('rula-critical-immediate', now=0)
    engine.generate(session, rula=rula, now=0)

    session.clear()
    assert ids(engine.generate(session, rula=rula, now=1)) == ['rula-critical-immediate']


def test_sessions_are_independent(engine):
    first, second = RecommendationSession(), RecommendationSession()
    rula = make_rula(final_score=7)

    engine.generate(first, rula=rula, now=0)
    first.mark_shown('rula-critical-immediate', now=0)

    assert ids(engine.generate(second, rula=rula, now=1)) == ['rula-critical-immediate']


def test_break_reminders(engine, session):
    assert ids(engine.generate(session, session_duration=30 * 60, now=0)) == ['break-reminder-30']
    assert ids(engine.generate(RecommendationSession(), session_duration=20 * 60, now=0)) == ['eye-break-20']


def test_disabled_categories(engine):
    session = RecommendationSession(enabled_categories=('posture', 'movement'))
    rula = make_rula(final_score=7, upper_arm=3)

    assert ids(engine.generate(session, rula=rula, session_duration=30 * 60, now=0)) == ['rula-upper-arm-high']


def test_poor_pose_quality(engine, session, make_pose):
    hidden = ('nose', 'left_eye', 'right_eye', 'left_ear', 'right_ear', 'left_knee')
    pose = make_pose({name: (0.5, 0.5, 0.1) for name in hidden})

    assert ids(engine.generate(session, keypoints=pose, now=0)) == ['pose-quality-low']


def test_config_override():
    engine = RecommendationEngine({'max_recommendations': 1})
    rula = make_rula(final_score=7, upper_arm=4, wrist=4)

    assert len(engine.generate(RecommendationSession(), rula=rula, now=0)) == 1

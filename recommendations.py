"""
Ergonomic recommendations generated from RULA/REBA scores.

Throttling and "already shown" bookkeeping live in a RecommendationSession
owned by the caller, so several assessment sessions can run side by side.
"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from config import RECOMMENDATION_CONFIG
from poseDetection import calculate_pose_quality

PRIORITY_ORDER = {'critical': 1, 'high': 2, 'medium': 3, 'low': 4}


@dataclass(frozen=True)
class Recommendation:
    id: str
    priority: str       # 'critical', 'high', 'medium' or 'low'
    category: str       # 'posture', 'movement', 'environment' or 'breaks'
    title: str
    description: str
    action: str
    body_parts: Tuple[str, ...]
    duration: Optional[str] = None


@dataclass
class RecommendationSession:
    """Per-session recommendation state"""
    enabled_categories: Tuple[str, ...] = RECOMMENDATION_CONFIG['categories']
    last_generated: Optional[float] = None
    current: List[Recommendation] = field(default_factory=list)
    shown: Dict[str, float] = field(default_factory=dict)

    def mark_shown(self, recommendation_id, now=None):
        """Hide a recommendation for the next RECOMMENDATION_CONFIG['shown_expiry'] seconds"""
        self.shown[recommendation_id] = time.time() if now is None else now

    def is_hidden(self, recommendation_id, now):
        shown_at = self.shown.get(recommendation_id)
        if shown_at is None:
            return False
        if now - shown_at >= RECOMMENDATION_CONFIG['shown_expiry']:
            del self.shown[recommendation_id]
            return False
        return True

    def clear(self):
        self.shown.clear()
        self.current = []
        self.last_generated = None


def _rula_recommendations(rula):
    recommendations = []

    # Critical overall score first
    if rula.final_score >= 7:
        recommendations.append(Recommendation(
            id='rula-critical-immediate',
            priority='critical',
            category='breaks',
            title='CRITICAL: Immediate Action Required',
            description=f'RULA score of {rula.final_score}/7 indicates severe ergonomic risk',
            action='Stop current activity immediately. Take a break and readjust your entire workstation setup.',
            body_parts=('full-body',),
            duration='10-15 minutes'
        ))
    elif rula.final_score >= 5:
        recommendations.append(Recommendation(
            id='rula-high-action',
            priority='high',
            category='posture',
            title='High Risk Posture Detected',
            description=f'RULA score of {rula.final_score}/7 requires immediate attention',
            action='Adjust your posture now and take a short break within the next few minutes.',
            body_parts=('full-body',),
            duration='5 minutes'
        ))

    if rula.upper_arm >= 3:
        recommendations.append(Recommendation(
            id='rula-upper-arm-high',
            priority='critical' if rula.upper_arm >= 4 else 'high',
            category='posture',
            title='Upper Arm Position Critical',
            description=(f'Upper arms raised {round(rula.upper_arm_angle)}° from neutral position '
                         f'(Score: {rula.upper_arm}/6)'),
            action='Lower your arms and keep them close to your sides. Adjust chair height or desk level.',
            body_parts=('upper-arm',),
            duration='Immediate'
        ))

    if rula.wrist >= 3:
        recommendations.append(Recommendation(
            id='rula-wrist-high',
            priority='critical' if rula.wrist >= 4 else 'high',
            category='posture',
            title='Wrist Alignment Critical',
            description=f'Wrists bent {abs(round(rula.wrist_angle))}° from neutral (Score: {rula.wrist}/4)',
            action='Straighten wrists to neutral position. Use wrist rest or adjust keyboard height.',
            body_parts=('wrist',),
            duration='Immediate'
        ))

    if rula.neck >= 3:
        neck_angle = round(rula.neck_angle)
        forward = neck_angle > 0
        recommendations.append(Recommendation(
            id='rula-neck-high',
            priority='critical' if rula.neck >= 4 else 'high',
            category='posture',
            title='Neck Position Critical',
            description=(f"Neck {'forward' if forward else 'backward'} {abs(neck_angle)}° "
                         f"from neutral (Score: {rula.neck}/4)"),
            action=('Move monitor closer and higher. Pull chin back to align head over shoulders.'
                    if forward else 'Lower monitor or adjust viewing angle. Relax neck position.'),
            body_parts=('neck',),
            duration='Immediate'
        ))

    # Muscle fatigue from the grouped scores
    if rula.score_a >= 4 or rula.score_b >= 4:
        arm_issue = rula.score_a >= rula.score_b
        if arm_issue:
            recommendations.append(Recommendation(
                id='rula-arm-fatigue',
                priority='medium',
                category='movement',
                title='Arm Muscle Fatigue Risk',
                description=f'Upper limb stress detected (Score A: {rula.score_a})',
                action='Perform arm stretches and shoulder rolls. Rest arms by your sides.',
                body_parts=('upper-arm', 'lower-arm', 'wrist'),
                duration='2-3 minutes'
            ))
        else:
            recommendations.append(Recommendation(
                id='rula-neck-fatigue',
                priority='medium',
                category='movement',
                title='Neck/Trunk Fatigue Risk',
                description=f'Neck and trunk stress detected (Score B: {rula.score_b})',
                action='Do neck rolls and shoulder shrugs. Adjust monitor position.',
                body_parts=('neck', 'trunk'),
                duration='2-3 minutes'
            ))

    return recommendations


def _reba_recommendations(reba):
    recommendations = []

    if reba.trunk >= 3:
        recommendations.append(Recommendation(
            id='reba-trunk-high',
            priority='critical' if reba.trunk >= 4 else 'high',
            category='posture',
            title='Back and Trunk Position',
            description='Your back is bent or twisted beyond safe limits',
            action='Straighten your back and use proper back support. Avoid twisting motions.',
            body_parts=('trunk', 'back'),
            duration='Immediate'
        ))

    if reba.legs >= 2:
        recommendations.append(Recommendation(
            id='reba-legs-high',
            priority='high' if reba.legs >= 3 else 'medium',
            category='posture',
            title='Leg and Foot Position',
            description='Your leg position indicates potential circulation or support issues',
            action='Ensure feet are flat on floor or footrest. Take walking breaks regularly.',
            body_parts=('legs', 'feet'),
            duration='2-3 minutes'
        ))

    if reba.final_score >= 8:
        recommendations.append(Recommendation(
            id='reba-critical-overall',
            priority='critical',
            category='breaks',
            title='High Risk Activity Detected',
            description='Your current activity poses high ergonomic risk to your entire body',
            action='Stop current activity immediately and take a proper break.',
            body_parts=('full-body',),
            duration='10-15 minutes'
        ))
    elif reba.final_score >= 4:
        recommendations.append(Recommendation(
            id='reba-medium-overall',
            priority='medium',
            category='movement',
            title='Posture Adjustment Needed',
            description='Multiple body parts need attention to reduce risk',
            action='Make gradual adjustments to your posture and take micro-breaks.',
            body_parts=('full-body',),
            duration='1-2 minutes'
        ))

    return recommendations


def _session_recommendations(session_duration):
    recommendations = []
    minutes = int(session_duration // 60)

    if minutes >= 30 and minutes % 30 == 0:
        recommendations.append(Recommendation(
            id=f'break-reminder-{minutes}',
            priority='medium',
            category='breaks',
            title='Regular Break Time',
            description=f"You've been working for {minutes} minutes",
            action='Take a 5-10 minute break. Stand up, stretch, and move around.',
            body_parts=('full-body',),
            duration='5-10 minutes'
        ))

    # Eye strain
    if minutes >= 20 and minutes % 20 == 0:
        recommendations.append(Recommendation(
            id=f'eye-break-{minutes}',
            priority='low',
            category='breaks',
            title='20-20-20 Rule',
            description='Protect your eyes from digital strain',
            action='Look at something 20 feet away for 20 seconds.',
            body_parts=('eyes',),
            duration='20 seconds'
        ))

    return recommendations


def _pose_quality_recommendations(keypoints):
    quality = calculate_pose_quality(keypoints)
    if quality.confidence >= RECOMMENDATION_CONFIG['min_pose_confidence']:
        return []

    return [Recommendation(
        id='pose-quality-low',
        priority='low',
        category='environment',
        title='Improve Camera Position',
        description='Pose detection quality is suboptimal',
        action='Ensure good lighting and position yourself fully in the camera frame.',
        body_parts=('environment',),
        duration='Immediate'
    )]


class RecommendationEngine:
    def __init__(self, config=None):
        self.config = dict(RECOMMENDATION_CONFIG)
        if config:
            self.config.update(config)

    def _min_interval(self, rula, reba, session_duration):
        high_risk = ((rula is not None and rula.final_score >= self.config['rula_high_risk'])
                     or (reba is not None and reba.final_score >= self.config['reba_high_risk']))
        if high_risk:
            return self.config['high_risk_interval']
        if session_duration < self.config['early_session_length']:
            return self.config['early_session_interval']
        return self.config['default_interval']

    def generate(self, session, rula=None, reba=None, keypoints=None,
                 session_duration=0, assessment_type='both', now=None):
        """
        Build the recommendations to show for the current frame.

        Args:
            session: RecommendationSession holding this session's state
            rula, reba: current RulaScore / RebaScore (either may be None)
            keypoints: current frame keypoints, for pose quality advice
            session_duration: seconds since the session started
            assessment_type: 'rula', 'reba' or 'both'
            now: current time in seconds, defaults to time.time()

        Returns:
            Up to config['max_recommendations'] recommendations, most
            urgent first. Within the throttle interval the previous
            list is returned unchanged.
        """
        if assessment_type not in ('rula', 'reba', 'both'):
            raise ValueError(f"Unknown assessment type {assessment_type!r}")

        if now is None:
            now = time.time()

        if session.last_generated is not None:
            interval = self._min_interval(rula, reba, session_duration)
            if now - session.last_generated < interval:
                return list(session.current)

        candidates = []
        if rula is not None and assessment_type in ('rula', 'both'):
            candidates.extend(_rula_recommendations(rula))
        if reba is not None and assessment_type in ('reba', 'both'):
            candidates.extend(_reba_recommendations(reba))
        if 'breaks' in session.enabled_categories:
            candidates.extend(_session_recommendations(session_duration))
        if keypoints is not None:
            candidates.extend(_pose_quality_recommendations(keypoints))

        selected = [
            rec for rec in candidates
            if rec.category in session.enabled_categories and not session.is_hidden(rec.id, now)
        ]
        selected.sort(key=lambda rec: PRIORITY_ORDER.get(rec.priority, 5))
        selected = selected[:self.config['max_recommendations']]

        session.current = selected
        session.last_generated = now

        return list(selected)

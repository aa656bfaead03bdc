"""Assessment report data and JSON rendering"""

import json
from datetime import datetime

from config import REPORT_CONFIG
from poseDetection import calculate_pose_quality
from utils import format_duration

RULA_REPORT_RECOMMENDATIONS = (
    (2, [
        'Current posture is acceptable',
        'Continue monitoring during extended work periods',
        'Take regular breaks every 30-60 minutes',
        'Maintain good lighting and workstation setup'
    ]),
    (4, [
        'Minor ergonomic concerns detected',
        'Adjust chair height and monitor position',
        'Check keyboard and mouse placement',
        'Take micro-breaks every 20-30 minutes',
        'Consider ergonomic accessories'
    ]),
    (6, [
        'Significant ergonomic issues identified',
        'Immediate workstation assessment required',
        'Adjust chair, desk, and monitor configuration',
        'Implement regular stretching exercises',
        'Consider ergonomic training',
        'Take breaks every 15-20 minutes'
    ]),
    (7, [
        'Critical ergonomic risk detected',
        'Stop current activity immediately',
        'Comprehensive workstation redesign needed',
        'Consult with ergonomics specialist',
        'Implement job rotation if possible',
        'Consider alternative work methods'
    ])
)

REBA_REPORT_RECOMMENDATIONS = (
    (1, [
        'Negligible risk - posture is acceptable',
        'Continue current practices',
        'Monitor for any changes in work conditions'
    ]),
    (3, [
        'Low risk detected',
        'Minor improvements may be beneficial',
        'Regular posture awareness training',
        'Implement micro-breaks'
    ]),
    (7, [
        'Medium risk - investigation required',
        'Implement corrective measures',
        'Workstation assessment needed',
        'Regular breaks and stretching',
        'Consider ergonomic improvements'
    ]),
    (10, [
        'High risk - immediate action required',
        'Comprehensive ergonomic assessment',
        'Implement changes soon',
        'Consider alternative work methods',
        'Regular monitoring required'
    ]),
    (15, [
        'Very high risk - critical intervention needed',
        'Immediate workstation changes required',
        'Stop current activity if possible',
        'Consult ergonomics specialist',
        'Implement comprehensive risk controls'
    ])
)


def get_report_recommendations(score, assessment):
    """Static advice for a final score band ('rula' or 'reba')"""
    if assessment == 'rula':
        bands = RULA_REPORT_RECOMMENDATIONS
    elif assessment == 'reba':
        bands = REBA_REPORT_RECOMMENDATIONS
    else:
        raise ValueError(f"Unknown assessment {assessment!r}")

    for upper, recommendations in bands:
        if score <= upper:
            return list(recommendations)
    return list(bands[-1][1])


def prepare_report_data(rula, reba, keypoints, session_duration,
                        assessment_type='both', timestamp=None):
    """
    Collect everything a report needs into plain dicts.

    Args:
        rula: RulaScore or None
        reba: RebaScore or None
        keypoints: keypoints of the frame being reported
        session_duration: seconds since the session started
        assessment_type: 'rula', 'reba' or 'both'
        timestamp: datetime of the report, defaults to now
    """
    if assessment_type not in ('rula', 'reba', 'both'):
        raise ValueError(f"Unknown assessment type {assessment_type!r}")

    if timestamp is None:
        timestamp = datetime.now()

    quality = calculate_pose_quality(keypoints)

    report_data = {
        'session_info': {
            'timestamp': timestamp.strftime(REPORT_CONFIG['timestamp_format']),
            'duration': format_duration(session_duration),
            'assessment_type': assessment_type
        },
        'pose_quality': {
            'total_keypoints': quality.total_keypoints,
            'valid_keypoints': quality.valid_keypoints,
            'confidence': quality.confidence
        }
    }

    if rula is not None:
        rula_data = rula.to_dict()
        rula_data['recommendations'] = get_report_recommendations(rula.final_score, 'rula')
        report_data['rula_score'] = rula_data

    if reba is not None:
        reba_data = reba.to_dict()
        reba_data['recommendations'] = get_report_recommendations(reba.final_score, 'reba')
        report_data['reba_score'] = reba_data

    return report_data


def generate_json_report(report_data, generated_at=None):
    if generated_at is None:
        generated_at = datetime.now()

    output = dict(report_data)
    output.update(
        generated_at=generated_at.isoformat(),
        version=REPORT_CONFIG['version'],
        format=REPORT_CONFIG['format']
    )
    return json.dumps(output, indent=2, default=str)

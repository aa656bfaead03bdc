"""Configuration for the ergonomic scoring engine"""

# Keypoint input configuration (COCO 17-keypoint layout)
KEYPOINT_CONFIG = {
    'num_keypoints': 17,
    'min_confidence': 0.3,   # score <= this is treated as an absent joint
    'default_wrist_angle': 15.0  # wrist flexion can't be observed from 2D body keypoints
}

COCO_KEYPOINTS = {
    'nose': 0,
    'left_eye': 1,
    'right_eye': 2,
    'left_ear': 3,
    'right_ear': 4,
    'left_shoulder': 5,
    'right_shoulder': 6,
    'left_elbow': 7,
    'right_elbow': 8,
    'left_wrist': 9,
    'right_wrist': 10,
    'left_hip': 11,
    'right_hip': 12,
    'left_knee': 13,
    'right_knee': 14,
    'left_ankle': 15,
    'right_ankle': 16
}

# MediaPipe BlazePose (33 landmarks) index for each COCO keypoint, in COCO order
BLAZEPOSE_TO_COCO = [0, 2, 5, 7, 8, 11, 12, 13, 14, 15, 16, 23, 24, 25, 26, 27, 28]

# RULA thresholds (degrees)
RULA_THRESHOLDS = {
    'upper_arm': (20, 45, 90),
    'lower_arm_neutral': (60, 100),
    'wrist': (5, 15),
    'neck': (10, 20),
    'trunk': (5, 20, 60)
}

# REBA thresholds (degrees)
REBA_THRESHOLDS = {
    'neck': 20,
    'trunk': (5, 20, 60),
    'knee_flexion': 30,
    'default_knee_angle': 30.0,
    'upper_arm': (20, 45, 90),
    # Extension band, only reached when a caller passes a signed upper arm angle
    'upper_arm_extension': -20,
    'lower_arm_neutral': (60, 100),
    'wrist': 15
}

# Risk levels: (highest final score in band, label)
RULA_RISK_LEVELS = [
    (2, 'Acceptable'),
    (4, 'Investigate'),
    (6, 'Investigate Soon'),
    (7, 'Investigate Immediately')
]

REBA_RISK_LEVELS = [
    (1, 'Negligible', 'None necessary'),
    (3, 'Low', 'May be necessary'),
    (7, 'Medium', 'Necessary'),
    (10, 'High', 'Necessary soon'),
    (15, 'Very High', 'Necessary now')
]

# Posture-based weight estimation (normalised image coordinates)
WEIGHT_DETECTION_CONFIG = {
    'extended_elbow_range': (30, 150),
    'wrist_away_threshold': 0.05,
    'overhead_threshold': 0.1,
    'forward_lean_threshold': 0.15,
    'asymmetry_threshold': 30,
    'lifting_weight': 10,
    'carrying_weight': 7,
    'overhead_weight': 12,
    'asymmetry_bonus': 3,
    'forward_lean_bonus': 5,
    'holding_confidence': 0.8,
    'idle_confidence': 0.1
}

# Weight multipliers. RULA bands are exclusive lower bounds (weight > kg),
# REBA bands are inclusive upper bounds (weight <= kg).
RULA_WEIGHT_BANDS = [
    (23, 3),
    (10, 2),
    (5, 1.5)
]

REBA_WEIGHT_BANDS = [
    (5, 1.0),
    (10, 1.1),
    (20, 1.3),
    (40, 1.5)
]
REBA_MAX_WEIGHT_MULTIPLIER = 1.8

# Recommendation engine configuration
RECOMMENDATION_CONFIG = {
    'high_risk_interval': 3.0,      # seconds between updates when at high risk
    'early_session_interval': 8.0,
    'default_interval': 15.0,
    'early_session_length': 60,
    'rula_high_risk': 5,
    'reba_high_risk': 8,
    'max_recommendations': 2,
    'shown_expiry': 600.0,          # seconds a dismissed recommendation stays hidden
    'min_pose_confidence': 70,
    'categories': ('posture', 'movement', 'environment', 'breaks')
}

# REBA recording session configuration
RECORDING_CONFIG = {
    'duration': 60.0,
    'high_risk_threshold': 8
}

# Report configuration
REPORT_CONFIG = {
    'version': '1.0',
    'format': 'Ergonomic Assessment Report',
    'timestamp_format': '%Y-%m-%d %H:%M:%S'
}

# Logging configuration
LOGGING_CONFIG = {
    'log_directory': 'logs',
    'log_to_file': False,
    'file_prefix': 'ergo_assessment_',
    'date_format': '%Y-%m-%d %H:%M:%S',
    'timestamp_format': '%Y%m%d_%H%M%S'
}

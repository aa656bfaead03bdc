"""
Value objects passed between the scoring components.
"""

from dataclasses import asdict, dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class Keypoint:
    """Single 2D body keypoint"""
    x: float
    y: float
    score: float = 0.0


@dataclass(frozen=True)
class PoseQuality:
    total_keypoints: int
    valid_keypoints: int
    confidence: int  # percent of the 17 expected keypoints that are present


@dataclass(frozen=True)
class RulaAdjustments:
    """Posture modifiers that can't be observed from 2D body keypoints"""
    shoulder_raised: bool = False
    arm_abducted: bool = False
    arm_supported: bool = False
    across_midline: bool = False
    wrist_deviated: bool = False
    neck_twisted: bool = False
    trunk_twisted: bool = False


@dataclass(frozen=True)
class RebaAdjustments:
    neck_twisted: bool = False
    trunk_twisted: bool = False
    legs_supported: bool = True
    shoulder_raised: bool = False
    arm_abducted: bool = False
    arm_supported: bool = False
    wrist_twisted: bool = False
    # Reserved load/coupling and activity points, added to the Table C score
    load_coupling: int = 0
    activity: int = 0


@dataclass(frozen=True)
class RulaScore:
    upper_arm: int
    lower_arm: int
    wrist: int
    neck: int
    trunk: int
    score_a: int
    score_b: int
    final_score: int
    risk_level: str
    upper_arm_angle: float = 0.0
    lower_arm_angle: float = 0.0
    wrist_angle: float = 0.0
    neck_angle: float = 0.0
    trunk_angle: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class RebaScore:
    neck: int
    trunk: int
    legs: int
    upper_arm: int
    lower_arm: int
    wrist: int
    score_a: int
    score_b: int
    final_score: int
    risk_level: str
    action_level: str
    neck_angle: float = 0.0
    trunk_angle: float = 0.0
    upper_arm_angle: float = 0.0
    lower_arm_angle: float = 0.0
    wrist_angle: float = 0.0
    knee_angle: float = 0.0

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class AdjustedRulaScore(RulaScore):
    effective_weight: float = 0.0
    weight_multiplier: float = 1.0
    is_weight_adjusted: bool = True


@dataclass(frozen=True)
class AdjustedRebaScore(RebaScore):
    effective_weight: float = 0.0
    weight_multiplier: float = 1.0
    is_weight_adjusted: bool = True


@dataclass(frozen=True)
class PostureAnalysis:
    is_lifting: bool = False
    is_carrying: bool = False
    arm_position: str = 'close'     # 'extended', 'close' or 'overhead'
    spine_deviation: float = 0.0
    load_direction: str = 'front'   # 'front', 'side' or 'back'; always 'front' for now


@dataclass(frozen=True)
class DetectedObject:
    object_type: str                # 'box', 'bag', 'tool' or 'unknown'
    estimated_weight: float
    confidence: float
    position: Tuple[float, float, float, float]


@dataclass(frozen=True)
class WeightEstimation:
    estimated_weight: float = 0.0
    confidence: float = 0.1
    detected_objects: Tuple[DetectedObject, ...] = ()
    body_posture: PostureAnalysis = field(default_factory=PostureAnalysis)

    @property
    def is_holding_object(self) -> bool:
        return self.body_posture.is_lifting or self.body_posture.is_carrying

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class ManualWeight:
    """An item the user reports handling, weight in grams"""
    id: str
    name: str
    weight_grams: float
    icon: Optional[str] = None

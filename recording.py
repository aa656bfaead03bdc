"""
REBA recording session.

Records REBA scores over a fixed window (one minute by default) and
builds three series from them: the plain score, the score adjusted for
the posture-estimated load, and the score adjusted for the manually
entered items.
"""

import logging
import time

import pandas as pd

from config import RECORDING_CONFIG
from rebaScoring import REBAScorer
from weightAdjustment import calculate_weight_adjusted_reba, total_manual_weight
from weightDetection import estimate_weight_from_posture

logger = logging.getLogger(__name__)

FRAME_COLUMNS = [
    'time', 'normal_score', 'estimated_score', 'manual_score',
    'estimated_weight', 'has_object'
]


class RebaRecorder:
    def __init__(self, duration=None, high_risk_threshold=None, scorer=None):
        """
        Args:
            duration: recording length in seconds
            high_risk_threshold: REBA score counted as high risk in the summary
            scorer: REBAScorer to use, a new one by default
        """
        if duration is None:
            duration = RECORDING_CONFIG['duration']
        if duration <= 0:
            raise ValueError(f"Recording duration must be positive, got {duration}")

        self.duration = float(duration)
        self.high_risk_threshold = (RECORDING_CONFIG['high_risk_threshold']
                                    if high_risk_threshold is None else high_risk_threshold)
        self.scorer = scorer or REBAScorer()

        self.frames = []
        self.manual_weights = []
        self.start_time = None
        self.is_recording = False

    def start(self, now=None):
        """Start a new recording, dropping any previously recorded frames"""
        self.frames = []
        self.start_time = time.time() if now is None else now
        self.is_recording = True
        logger.info("REBA recording started (%.0f s)", self.duration)

    def stop(self):
        if self.is_recording:
            logger.info("REBA recording stopped after %d frames", len(self.frames))
        self.is_recording = False

    def clear(self):
        self.stop()
        self.frames = []
        self.start_time = None

    def progress(self, now=None):
        """Recording progress in percent (0-100)"""
        if self.start_time is None:
            return 0.0
        if now is None:
            now = time.time()
        elapsed = now - self.start_time
        return max(0.0, min(100.0, elapsed / self.duration * 100))

    def add_frame(self, keypoints, timestamp=None):
        """
        Score one frame and add it to the recording.

        Returns:
            True if the frame was recorded. Frames are rejected while the
            recorder is stopped, when the pose can't be scored, and once
            the duration has passed (which also stops the recording).
        """
        if self.start_time is None:
            raise ValueError("Recording has not been started")

        if not self.is_recording:
            return False

        if timestamp is None:
            timestamp = time.time()

        if timestamp - self.start_time > self.duration:
            self.stop()
            return False

        reba = self.scorer.calculate_reba_score(keypoints)
        if reba is None:
            logger.debug("Frame at %.2f s not recorded: pose insufficient",
                         timestamp - self.start_time)
            return False

        self.frames.append({
            'timestamp': timestamp,
            'reba': reba,
            'weight_estimation': estimate_weight_from_posture(keypoints)
        })
        return True

    def add_manual_weight(self, item):
        """Add a manually entered item; an id already present is ignored"""
        if any(existing.id == item.id for existing in self.manual_weights):
            return False
        self.manual_weights.append(item)
        return True

    def remove_manual_weight(self, item_id):
        self.manual_weights = [item for item in self.manual_weights if item.id != item_id]

    @property
    def manual_weight_total(self):
        """Total manual weight in kg"""
        return total_manual_weight(self.manual_weights)

    def to_dataframe(self):
        """Per-frame scores as a DataFrame with FRAME_COLUMNS"""
        manual_total = self.manual_weight_total
        rows = []

        for frame in self.frames:
            reba = frame['reba']
            estimation = frame['weight_estimation']

            estimated = calculate_weight_adjusted_reba(reba, estimation)
            if self.manual_weights:
                manual_score = calculate_weight_adjusted_reba(
                    reba, estimation, manual_weight=manual_total).final_score
            else:
                manual_score = reba.final_score

            time_offset = frame['timestamp'] - self.start_time
            rows.append({
                'time': max(0.0, min(self.duration, time_offset)),
                'normal_score': reba.final_score,
                'estimated_score': estimated.final_score,
                'manual_score': manual_score,
                'estimated_weight': estimation.estimated_weight,
                'has_object': estimation.is_holding_object
            })

        return pd.DataFrame(rows, columns=FRAME_COLUMNS)

    def get_summary(self):
        """Summary statistics for the recording"""
        df = self.to_dataframe()

        summary = {
            'total_frames': len(df),
            'recorded_seconds': round(float(df['time'].max()), 1) if len(df) else 0.0,
            'average_normal_score': 0.0,
            'max_normal_score': 0,
            'average_estimated_score': 0.0,
            'max_estimated_score': 0,
            'average_manual_score': 0.0,
            'max_manual_score': 0,
            'high_risk_percentage': 0.0,
            'object_frames': 0,
            'manual_weight_total': self.manual_weight_total
        }

        if len(df) == 0:
            return summary

        for series in ('normal', 'estimated', 'manual'):
            column = df[f'{series}_score']
            summary[f'average_{series}_score'] = round(float(column.mean()), 1)
            summary[f'max_{series}_score'] = int(column.max())

        high_risk_frames = (df['normal_score'] >= self.high_risk_threshold).sum()
        summary['high_risk_percentage'] = round(float(high_risk_frames) / len(df) * 100, 1)
        summary['object_frames'] = int(df['has_object'].sum())

        return summary

    def export_csv(self, filename):
        """Write the per-frame series to a CSV file"""
        self.to_dataframe().to_csv(filename, index=False)
        return filename

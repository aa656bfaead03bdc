"""Batch ergonomic analysis of recorded keypoint sequences"""

import argparse
import json
import logging
import sys

import pandas as pd

from logging_config import setup_logger
from poseDetection import calculate_pose_quality
from rebaScoring import REBAScorer
from rulaScoring import RULAScorer
from utils import save_analysis_report
from weightAdjustment import calculate_weight_adjusted_reba, calculate_weight_adjusted_rula
from weightDetection import estimate_weight_from_posture

logger = logging.getLogger(__name__)

HIGH_RISK_REBA = 8


def load_models():
    rula_scorer = RULAScorer()
    reba_scorer = REBAScorer()
    return rula_scorer, reba_scorer


def process_frame(keypoints, manual_weight=None, rula_scorer=None, reba_scorer=None):
    """
    Score a single frame and return results.

    Args:
        keypoints: 17 COCO keypoints for the frame
        manual_weight: handled load in kg, overrides the posture estimate
        rula_scorer, reba_scorer: scorer instances, created if not given

    Returns:
        (result dict, None) or (None, error message)
    """
    if rula_scorer is None or reba_scorer is None:
        rula_scorer, reba_scorer = load_models()

    rula = rula_scorer.calculate_rula_score(keypoints)
    reba = reba_scorer.calculate_reba_score(keypoints)

    if rula is None or reba is None:
        return None, "Insufficient keypoints for assessment"

    weight_estimation = estimate_weight_from_posture(keypoints)

    return {
        'rula': rula,
        'reba': reba,
        'weight_estimation': weight_estimation,
        'adjusted_rula': calculate_weight_adjusted_rula(rula, weight_estimation, manual_weight),
        'adjusted_reba': calculate_weight_adjusted_reba(reba, weight_estimation, manual_weight),
        'pose_quality': calculate_pose_quality(keypoints)
    }, None


def analyze_sequence(frames, fps=30, sample_rate=1, manual_weight=None):
    """
    Analyze a sequence of keypoint frames.

    Frames that can't be scored are skipped. Returns one flat row per
    analyzed frame.
    """
    if fps <= 0:
        raise ValueError(f"fps must be positive, got {fps}")
    if sample_rate < 1:
        raise ValueError(f"sample_rate must be at least 1, got {sample_rate}")

    rula_scorer, reba_scorer = load_models()
    results = []
    skipped = 0

    for frame_count, keypoints in enumerate(frames):
        # Process only sampled frames
        if frame_count % sample_rate != 0:
            continue

        result, error = process_frame(keypoints, manual_weight, rula_scorer, reba_scorer)
        if result is None:
            skipped += 1
            logger.debug("Frame %d skipped: %s", frame_count, error)
            continue

        rula, reba = result['rula'], result['reba']
        results.append({
            'frame': frame_count,
            'timestamp': frame_count / fps,
            'rula_score': rula.final_score,
            'rula_risk_level': rula.risk_level,
            'reba_score': reba.final_score,
            'reba_risk_level': reba.risk_level,
            'estimated_weight': result['weight_estimation'].estimated_weight,
            'adjusted_rula_score': result['adjusted_rula'].final_score,
            'adjusted_reba_score': result['adjusted_reba'].final_score,
            'pose_confidence': result['pose_quality'].confidence,
            'trunk_angle': reba.trunk_angle,
            'neck_angle': reba.neck_angle
        })

    if skipped:
        logger.info("Skipped %d frame(s) without a usable pose", skipped)

    return results


def summarize_results(results):
    """Summary statistics over analyze_sequence rows"""
    if not results:
        return {'frames_analyzed': 0}

    df = pd.DataFrame(results)

    return {
        'frames_analyzed': len(df),
        'duration_seconds': round(float(df['timestamp'].max() - df['timestamp'].min()), 2),
        'average_rula_score': round(float(df['rula_score'].mean()), 2),
        'max_rula_score': int(df['rula_score'].max()),
        'average_reba_score': round(float(df['reba_score'].mean()), 2),
        'max_reba_score': int(df['reba_score'].max()),
        'average_adjusted_reba_score': round(float(df['adjusted_reba_score'].mean()), 2),
        'high_risk_percentage': round(float((df['reba_score'] >= HIGH_RISK_REBA).sum()) / len(df) * 100, 1),
        'rula_risk_distribution': df['rula_risk_level'].value_counts().to_dict(),
        'reba_risk_distribution': df['reba_risk_level'].value_counts().to_dict()
    }


def load_frames(path):
    """
    Read keypoint frames from a JSON file.

    Accepts a list of frames, or an object with a "frames" list. Each frame
    is either a keypoint list or an object with a "keypoints" list.
    """
    with open(path) as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('frames')
    if not isinstance(data, list):
        raise ValueError("expected a list of frames")

    return [frame.get('keypoints') if isinstance(frame, dict) else frame for frame in data]


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="RULA/REBA ergonomic assessment of keypoint sequences")
    parser.add_argument("input", help="JSON file of 17-keypoint frames")
    parser.add_argument("--fps", type=float, default=30.0, help="Frame rate of the sequence")
    parser.add_argument("--sample-rate", type=int, default=1, help="Analyze every Nth frame")
    parser.add_argument("--manual-weight", type=float, default=None,
                        help="Handled load in kg, overrides the posture estimate")
    parser.add_argument("--output", default=None, help="Write summary and frame results to this JSON file")
    parser.add_argument("--csv", default=None, help="Write frame results to this CSV file")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    parser.add_argument("--verbose", action="store_true", help="Show debug output")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logger(None, log_file=args.log_file,
                 level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        frames = load_frames(args.input)
    except (OSError, ValueError) as e:
        logger.error("Could not read %s: %s", args.input, e)
        return 1

    try:
        results = analyze_sequence(frames, fps=args.fps, sample_rate=args.sample_rate,
                                   manual_weight=args.manual_weight)
    except ValueError as e:
        logger.error("Invalid arguments: %s", e)
        return 2

    summary = summarize_results(results)

    if not results:
        logger.warning("No frames could be assessed in %s", args.input)
    else:
        logger.info("Analyzed %d of %d frames", summary['frames_analyzed'], len(frames))
        logger.info("RULA: average %.1f, max %d", summary['average_rula_score'], summary['max_rula_score'])
        logger.info("REBA: average %.1f, max %d", summary['average_reba_score'], summary['max_reba_score'])
        logger.info("High risk frames: %.1f%%", summary['high_risk_percentage'])

    if args.output:
        save_analysis_report({'summary': summary, 'frames': results}, args.output)
        logger.info("Report saved to %s", args.output)

    if args.csv:
        pd.DataFrame(results).to_csv(args.csv, index=False)
        logger.info("Frame results saved to %s", args.csv)

    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Utility functions for the ergonomic scoring engine"""

import json
import math


def clamp(value, lower, upper):
    """Clamp value into [lower, upper]"""
    return max(lower, min(upper, value))


def round_half_up(value):
    """Round to the nearest integer with .5 going up (Python's round() goes to even)"""
    return int(math.floor(value + 0.5))


def format_duration(seconds):
    """Format a duration in seconds as M:SS, or H:MM:SS past an hour"""
    seconds = max(0, int(seconds))
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def save_analysis_report(results, filename):
    """Save analysis results to file"""
    with open(filename, 'w') as f:
        json.dump(results, f, indent=2, default=str)

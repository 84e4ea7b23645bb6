"""
pose_transform.py - Landmark position -> single servo angle.

This is a placeholder retargeting, not inverse kinematics: each joint
category maps ONE normalised coordinate through a fixed affine formula
around the 90 degree centre.

    category      axis   formula            range
    Shoulder*     y      90 + 45*y          45-135
    Elbow*        z      90 - 60*z          30-150
    Hip*          y      90 + 30*y          60-120
    Knee*         z      90 + 45*z          45-135
    Waist         x      90 + 45*x          45-135
    Head_Pan      x      90 + 60*x          30-150
    Head_Tilt     y      90 + 30*y          60-120

(* = substring match on the channel name, checked in table order, so
'Left_Shoulder_Pan' falls in the Shoulder category.)

x and y arrive in [0, 1] and are rescaled to [-1, 1]; z is used as-is.
The result is rounded half-up and clamped to [0, 180].
"""
from __future__ import annotations

import numpy as np

from skill_tools.servo_registry import CENTER_ANGLE
from skill_tools.servo_registry import MAX_ANGLE
from skill_tools.servo_registry import MIN_ANGLE

# (match, axis, gain); match is ('contains', text) or ('equals', text)
ANGLE_FORMULAS = (
    (('contains', 'Shoulder'), 'y', 45.0),
    (('contains', 'Elbow'), 'z', -60.0),
    (('contains', 'Hip'), 'y', 30.0),
    (('contains', 'Knee'), 'z', 45.0),
    (('equals', 'Waist'), 'x', 45.0),
    (('equals', 'Head_Pan'), 'x', 60.0),
    (('equals', 'Head_Tilt'), 'y', 30.0),
)


def normalize_position(landmark) -> dict[str, float]:
    """Map x, y from [0, 1] to [-1, 1]; z passes through."""
    x, y, z = _coords(landmark)
    return {
        'x': (x - 0.5) * 2,
        'y': (y - 0.5) * 2,
        'z': z,
    }


def find_formula(servo_name: str):
    """Return (axis, gain) for a channel name, or None for centre-only joints."""
    for (mode, text), axis, gain in ANGLE_FORMULAS:
        if mode == 'contains' and text in servo_name:
            return axis, gain
        if mode == 'equals' and servo_name == text:
            return axis, gain
    return None


def calculate_servo_angle(landmark, servo_name: str) -> int:
    """
    Convert one landmark to an integer servo angle in [0, 180].

    Args:
        landmark: object or dict with x, y and (optionally) z
        servo_name: target channel name, e.g. 'Left_Elbow'

    Returns:
        Angle in whole degrees. Joints without a formula return 90.
    """
    formula = find_formula(servo_name)
    if formula is None:
        return CENTER_ANGLE

    axis, gain = formula
    value = normalize_position(landmark)[axis]
    angle = CENTER_ANGLE + gain * value
    if np.isnan(angle):
        return CENTER_ANGLE

    # half-up rounding, then clamp to the servo range
    angle = np.floor(angle + 0.5)
    return int(np.clip(angle, MIN_ANGLE, MAX_ANGLE))


def _coords(landmark) -> tuple[float, float, float]:
    if isinstance(landmark, dict):
        return (
            float(landmark.get('x', 0.0)),
            float(landmark.get('y', 0.0)),
            float(landmark.get('z', 0.0) or 0.0),
        )
    return (
        float(getattr(landmark, 'x', 0.0)),
        float(getattr(landmark, 'y', 0.0)),
        float(getattr(landmark, 'z', 0.0) or 0.0),
    )

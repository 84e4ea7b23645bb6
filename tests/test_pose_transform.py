"""
Tests for landmark -> servo angle conversion.
"""
from __future__ import annotations

import pytest

from configs.skill_models import Landmark
from skill_tools.pose_transform import calculate_servo_angle
from skill_tools.pose_transform import find_formula
from skill_tools.pose_transform import normalize_position
from skill_tools.servo_registry import CHANNEL_NAMES


def test_normalize_position():
    norm = normalize_position({'x': 0.0, 'y': 1.0, 'z': -0.3})
    assert norm == {'x': -1.0, 'y': 1.0, 'z': -0.3}


@pytest.mark.parametrize(
    'servo_name, landmark, expected',
    [
        # Shoulder: 90 + 45*y
        ('Left_Shoulder', {'x': 0.5, 'y': 1.0, 'z': 0}, 135),
        ('Right_Shoulder_Pan', {'x': 0.5, 'y': 0.0, 'z': 0}, 45),
        # Elbow: 90 - 60*z
        ('Left_Elbow', {'x': 0.5, 'y': 0.5, 'z': 0.5}, 60),
        ('Right_Elbow', {'x': 0.5, 'y': 0.5, 'z': -1.0}, 150),
        # Hip: 90 + 30*y
        ('Left_Hip', {'x': 0.5, 'y': 1.0, 'z': 0}, 120),
        # Knee: 90 + 45*z
        ('Right_Knee', {'x': 0.5, 'y': 0.5, 'z': -1.0}, 45),
        # Waist: 90 + 45*x
        ('Waist', {'x': 1.0, 'y': 0.5, 'z': 0}, 135),
        # Head_Pan: 90 + 60*x
        ('Head_Pan', {'x': 0.0, 'y': 0.5, 'z': 0}, 30),
        # Head_Tilt: 90 + 30*y
        ('Head_Tilt', {'x': 0.5, 'y': 0.0, 'z': 0}, 60),
    ],
)
def test_category_formulas(servo_name, landmark, expected):
    assert calculate_servo_angle(landmark, servo_name) == expected


@pytest.mark.parametrize('servo_name', ['Torso', 'Left_Wrist', 'Right_Thumb', 'Left_Ankle', 'Unknown'])
def test_joints_without_formula_stay_centered(servo_name):
    assert find_formula(servo_name) is None
    assert calculate_servo_angle({'x': 0.0, 'y': 0.0, 'z': 5.0}, servo_name) == 90


def test_shoulder_pan_uses_shoulder_formula():
    """Substring match: *_Shoulder_Pan is in the Shoulder category"""
    assert find_formula('Left_Shoulder_Pan') == find_formula('Left_Shoulder')


def test_rounds_half_up():
    # Knee: 90 + 45 * 0.1 = 94.5 -> 95
    assert calculate_servo_angle({'x': 0.5, 'y': 0.5, 'z': 0.1}, 'Left_Knee') == 95
    # Knee: 90 + 45 * -0.1 = 85.5 -> 86
    assert calculate_servo_angle({'x': 0.5, 'y': 0.5, 'z': -0.1}, 'Left_Knee') == 86


def test_result_is_clamped():
    assert calculate_servo_angle({'x': 0.5, 'y': 0.5, 'z': 10.0}, 'Left_Elbow') == 0
    assert calculate_servo_angle({'x': 0.5, 'y': 0.5, 'z': 10.0}, 'Left_Knee') == 180


def test_accepts_landmark_models():
    landmark = Landmark(id=0, x=0.75, y=0.5, z=0.0)
    assert calculate_servo_angle(landmark, 'Head_Pan') == 120


def test_output_bounds_over_grid():
    """Every channel and coordinate combination yields an int in [0, 180]"""
    values = [-5.0, -1.0, 0.0, 0.25, 0.5, 0.999, 1.0, 3.0]
    for name in CHANNEL_NAMES:
        for x in values:
            for y in values:
                for z in values:
                    angle = calculate_servo_angle({'x': x, 'y': y, 'z': z}, name)
                    assert isinstance(angle, int), f'{name} returned {type(angle)}'
                    assert 0 <= angle <= 180, f'{name} out of range: {angle}'


def test_nan_coordinate_returns_center():
    assert calculate_servo_angle({'x': float('nan'), 'y': 0.5, 'z': 0}, 'Waist') == 90

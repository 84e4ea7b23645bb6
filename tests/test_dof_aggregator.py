"""
Test landmark set -> DOF vector aggregation in skill_tools/dof_aggregator.py
"""
from __future__ import annotations

from configs.skill_models import MocapData
from skill_tools.dof_aggregator import channel_for_landmark
from skill_tools.dof_aggregator import convert_to_dof
from skill_tools.dof_aggregator import LANDMARK_TO_CHANNEL
from skill_tools.dof_aggregator import SHADOWED_ASSIGNMENTS
from skill_tools.servo_registry import CHANNEL_NAMES


def test_empty_landmarks_give_centered_vector():
    """No landmarks -> all 28 channels at 90"""
    for mocap in ({}, {'landmarks': {}}, {'landmarks': []}, MocapData(landmarks={})):
        dof = convert_to_dof(mocap)
        assert set(dof) == set(CHANNEL_NAMES), f'Wrong keys for {mocap!r}'
        assert all(v == 90 for v in dof.values()), f'Non-centered value for {mocap!r}'


def test_output_always_has_28_channels():
    mocap = {'landmarks': {str(i): {'x': 0.1, 'y': 0.9, 'z': 0.3} for i in range(33)}}
    dof = convert_to_dof(mocap)
    assert len(dof) == 28
    assert set(dof) == set(CHANNEL_NAMES)
    assert all(0 <= v <= 180 for v in dof.values())


def test_shadowed_assignments_are_last_write_wins():
    """Ids 13, 14, 23, 24 are assigned twice; the later mapping is the live one"""
    assert LANDMARK_TO_CHANNEL[13] == 'Left_Elbow'
    assert LANDMARK_TO_CHANNEL[14] == 'Right_Elbow'
    assert LANDMARK_TO_CHANNEL[23] == 'Left_Hip'
    assert LANDMARK_TO_CHANNEL[24] == 'Right_Hip'
    assert set(SHADOWED_ASSIGNMENTS) == {
        (13, 'Right_Shoulder'),
        (14, 'Right_Shoulder_Pan'),
        (23, 'Waist'),
        (24, 'Torso'),
    }


def test_shadowed_channels_are_never_driven():
    mocap = {'landmarks': {13: {'x': 0.5, 'y': 1.0, 'z': -1.0}, 23: {'x': 1.0, 'y': 1.0, 'z': 0}}}
    dof = convert_to_dof(mocap)
    # Elbow: 90 - 60 * -1 = 150; Hip: 90 + 30 * 1 = 120
    assert dof['Left_Elbow'] == 150
    assert dof['Left_Hip'] == 120
    assert dof['Right_Shoulder'] == 90
    assert dof['Waist'] == 90


def test_unmapped_landmarks_are_ignored():
    dof = convert_to_dof({'landmarks': {7: {'x': 0.0, 'y': 0.0, 'z': 0}, 'nose': {'x': 0, 'y': 0}}})
    assert all(v == 90 for v in dof.values())
    assert channel_for_landmark(7) is None
    assert channel_for_landmark('nose') is None
    assert channel_for_landmark('0') == 'Head_Pan'


def test_list_landmarks_use_id_or_index():
    landmarks = [{'x': 0.0, 'y': 0.5, 'z': 0}]  # index 0 -> Head_Pan
    assert convert_to_dof({'landmarks': landmarks})['Head_Pan'] == 30

    landmarks = [{'id': 25, 'x': 0.5, 'y': 0.5, 'z': -1.0}]
    assert convert_to_dof({'landmarks': landmarks})['Left_Knee'] == 45


def test_mocap_model_input():
    mocap = MocapData.model_validate({'landmarks': {'0': {'x': 1.0, 'y': 0.5}}})
    assert convert_to_dof(mocap)['Head_Pan'] == 150

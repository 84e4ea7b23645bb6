"""
dof_aggregator.py - Fold a landmark set into a complete DOF vector.

The output always holds exactly the 28 registry channels; channels with no
matching landmark stay at 90.

LANDMARK ASSIGNMENTS
--------------------
MediaPipe pose indices are mapped to channels by applying the assignment
list below in order. Ids 13, 14, 23 and 24 are assigned twice; only the
later assignment is live, so Right_Shoulder, Right_Shoulder_Pan, Waist and
Torso are never driven by a landmark (see SHADOWED_ASSIGNMENTS).
"""
from __future__ import annotations

import logging

from skill_tools.pose_transform import calculate_servo_angle
from skill_tools.servo_registry import default_dof_vector

logger = logging.getLogger(__name__)


LANDMARK_ASSIGNMENTS: tuple[tuple[int, str], ...] = (
    # Head
    (0, 'Head_Pan'),       # nose
    (1, 'Head_Tilt'),      # left eye inner
    (2, 'Head_Tilt'),      # left eye
    (3, 'Head_Tilt'),      # left eye outer
    (4, 'Head_Tilt'),      # right eye inner
    (5, 'Head_Tilt'),      # right eye
    (6, 'Head_Tilt'),      # right eye outer
    # Shoulders
    (11, 'Left_Shoulder'),
    (12, 'Left_Shoulder_Pan'),
    (13, 'Right_Shoulder'),
    (14, 'Right_Shoulder_Pan'),
    # Elbows
    (13, 'Left_Elbow'),
    (14, 'Right_Elbow'),
    # Wrists
    (15, 'Left_Wrist'),
    (16, 'Right_Wrist'),
    # Torso
    (23, 'Waist'),
    (24, 'Torso'),
    # Hips
    (23, 'Left_Hip'),
    (24, 'Right_Hip'),
    # Knees
    (25, 'Left_Knee'),
    (26, 'Right_Knee'),
    # Ankles
    (27, 'Left_Ankle'),
    (28, 'Right_Ankle'),
    # Hands (pose landmarks only; no hand model)
    (17, 'Left_Thumb'),    # left pinky
    (18, 'Left_Index'),    # right pinky
    (19, 'Right_Thumb'),   # left index
    (20, 'Right_Index'),   # right index
)

# last assignment per id wins
LANDMARK_TO_CHANNEL: dict[int, str] = dict(LANDMARK_ASSIGNMENTS)

SHADOWED_ASSIGNMENTS: tuple[tuple[int, str], ...] = tuple(
    (landmark_id, name)
    for landmark_id, name in LANDMARK_ASSIGNMENTS
    if LANDMARK_TO_CHANNEL[landmark_id] != name
)


def channel_for_landmark(landmark_id) -> str | None:
    try:
        return LANDMARK_TO_CHANNEL.get(int(landmark_id))
    except (TypeError, ValueError):
        return None


def _landmark_items(mocap_data):
    """Yield (id, landmark) from MocapData, {'landmarks': ...}, a dict or a list."""
    if hasattr(mocap_data, 'iter_landmarks'):
        yield from mocap_data.iter_landmarks()
        return

    landmarks = mocap_data
    if isinstance(mocap_data, dict) and 'landmarks' in mocap_data:
        landmarks = mocap_data['landmarks']
    if not landmarks:
        return

    if isinstance(landmarks, dict):
        yield from landmarks.items()
    else:
        for index, landmark in enumerate(landmarks):
            landmark_id = landmark.get('id') if isinstance(landmark, dict) else getattr(landmark, 'id', None)
            yield (index if landmark_id is None else landmark_id), landmark


def convert_to_dof(mocap_data) -> dict[str, int]:
    """
    Convert one frame of landmarks to a full DOF vector.

    Args:
        mocap_data: MocapData, {'landmarks': {...}}, or the landmarks themselves
                    (mapping id -> landmark, or a list of landmarks)

    Returns:
        dict of all 28 channel names -> angle; unmapped landmarks are ignored
    """
    dof_data = default_dof_vector()

    n_used = 0
    for landmark_id, landmark in _landmark_items(mocap_data):
        servo_name = channel_for_landmark(landmark_id)
        if servo_name is None:
            continue
        dof_data[servo_name] = calculate_servo_angle(landmark, servo_name)
        n_used += 1

    logger.debug(f'Converted landmarks to DOF vector ({n_used} landmarks mapped)')
    return dof_data

"""
servo_registry.py - Static servo channel definitions and ARC port tables.

Every DOF vector in the system is keyed by the channel names defined here.
The robot exposes 28 channels: 16 body servos and 12 hand servos, all with
the same [0, 180] degree range centred on 90.

Two port tables exist for ARC export and they disagree:
  - PRIMARY_PORT_MAP       used for a skill's ServoConfiguration (DOFData)
  - SAVED_POSITION_PORT_MAP used when remapping SavedPositions

e.g. 'Waist' is D6 in the primary table and D14 in the saved-position table.
They are kept as two separate lookups; do not merge them.
"""
from __future__ import annotations

from dataclasses import dataclass

MIN_ANGLE = 0
MAX_ANGLE = 180
CENTER_ANGLE = 90


@dataclass(frozen=True)
class ServoChannel:
    """One named servo joint and its valid angle range."""
    name: str
    group: str  # 'body' or 'hand'
    min_angle: int = MIN_ANGLE
    max_angle: int = MAX_ANGLE
    center_angle: int = CENTER_ANGLE

    def clamp(self, angle: float) -> float:
        return max(self.min_angle, min(self.max_angle, angle))


BODY_CHANNEL_NAMES = (
    'Head_Pan',
    'Head_Tilt',
    'Left_Shoulder',
    'Left_Shoulder_Pan',
    'Left_Elbow',
    'Right_Shoulder',
    'Right_Shoulder_Pan',
    'Right_Elbow',
    'Waist',
    'Torso',
    'Left_Hip',
    'Left_Knee',
    'Left_Ankle',
    'Right_Hip',
    'Right_Knee',
    'Right_Ankle',
)

HAND_CHANNEL_NAMES = (
    'Left_Thumb',
    'Left_Index',
    'Left_Middle',
    'Left_Ring',
    'Left_Pinky',
    'Left_Wrist',
    'Right_Thumb',
    'Right_Index',
    'Right_Middle',
    'Right_Ring',
    'Right_Pinky',
    'Right_Wrist',
)

CHANNELS: dict[str, ServoChannel] = {
    **{name: ServoChannel(name=name, group='body') for name in BODY_CHANNEL_NAMES},
    **{name: ServoChannel(name=name, group='hand') for name in HAND_CHANNEL_NAMES},
}

CHANNEL_NAMES = tuple(CHANNELS)


# ServoConfiguration ports (DOFData -> ARC port)
PRIMARY_PORT_MAP: dict[str, str] = {
    # Body servos
    'Head_Pan': 'D0',
    'Head_Tilt': 'D1',
    'Left_Shoulder': 'D2',
    'Left_Elbow': 'D3',
    'Right_Shoulder': 'D4',
    'Right_Elbow': 'D5',
    'Waist': 'D6',
    'Torso': 'D7',
    'Left_Hip': 'D8',
    'Left_Knee': 'D9',
    'Left_Ankle': 'D10',
    'Right_Hip': 'D11',
    'Right_Knee': 'D12',
    'Right_Ankle': 'D13',
    # Hand servos
    'Left_Thumb': 'D14',
    'Left_Index': 'D15',
    'Left_Middle': 'D16',
    'Left_Ring': 'D17',
    'Left_Pinky': 'D18',
    'Left_Wrist': 'D19',
    'Right_Thumb': 'D20',
    'Right_Index': 'D21',
    'Right_Middle': 'D22',
    'Right_Ring': 'D23',
    'Right_Pinky': 'D24',
    'Right_Wrist': 'D25',
}

# SavedPositions ports; hand servos live on virtual ports V1..V12
SAVED_POSITION_PORT_MAP: dict[str, str] = {
    # Body servos
    'Head_Pan': 'D0',
    'Head_Tilt': 'D1',
    'Left_Shoulder': 'D2',
    'Left_Shoulder_Pan': 'D3',
    'Left_Elbow': 'D4',
    'Right_Shoulder': 'D5',
    'Right_Shoulder_Pan': 'D6',
    'Right_Elbow': 'D7',
    'Waist': 'D14',
    'Torso': 'D15',
    'Left_Hip': 'D8',
    'Left_Knee': 'D9',
    'Left_Ankle': 'D10',
    'Right_Hip': 'D11',
    'Right_Knee': 'D12',
    'Right_Ankle': 'D13',
    # Hand servos
    'Left_Thumb': 'V1',
    'Left_Index': 'V2',
    'Left_Middle': 'V3',
    'Left_Ring': 'V4',
    'Left_Pinky': 'V5',
    'Left_Wrist': 'V6',
    'Right_Thumb': 'V7',
    'Right_Index': 'V8',
    'Right_Middle': 'V9',
    'Right_Ring': 'V10',
    'Right_Pinky': 'V11',
    'Right_Wrist': 'V12',
}


def get_channel(name: str) -> ServoChannel | None:
    return CHANNELS.get(name)


def is_known_channel(name: str) -> bool:
    return name in CHANNELS


def default_dof_vector() -> dict[str, int]:
    """All 28 channels at their centre angle."""
    return {name: channel.center_angle for name, channel in CHANNELS.items()}


def next_fallback_port(port_map: dict[str, str], assigned: dict) -> str:
    """
    Pick a 'D{n}' port for a servo name missing from port_map.

    Starts at the number of ports already assigned and skips any port that
    is already assigned or reserved by the table, so a fallback never
    overwrites another servo's entry.
    """
    reserved = set(port_map.values())
    n = len(assigned)
    while f'D{n}' in assigned or f'D{n}' in reserved:
        n += 1
    return f'D{n}'


def resolve_port(name: str, port_map: dict[str, str], assigned: dict) -> str:
    """Port for a servo name, falling back to an auto-incremented D{n}."""
    port = port_map.get(name)
    if port is None:
        port = next_fallback_port(port_map, assigned)
    return port

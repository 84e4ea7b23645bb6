"""
arc_exporter.py - Build ARC skill packages (.arcskill).

An ARC package is a JSON envelope:

    {
      "SkillName": ..., "Description": ..., "Author": ..., "Version": "1.0.0",
      "CreationDate": ..., "ARCVersion": "2023.1",
      "TargetController": "EZ-B V4", "RequiredPlugins": [],
      "CompatibleControllers": ["EZ-B V4", "EZ-B V5"],
      "ServoConfiguration": {port: {Name, DefaultPosition, MinPosition,
                                    MaxPosition, Speed}},
      "SavedPositions": {name: {ServoPositions: {port: angle}, Speed}},
      "SkillScript": "<generated script text>"
    }

ServoConfiguration ports come from PRIMARY_PORT_MAP, SavedPositions ports
from SAVED_POSITION_PORT_MAP.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime

from configs.appconfig import AppConfig
from skill_tools.schemas import ExportArtifact
from skill_tools.servo_registry import MAX_ANGLE
from skill_tools.servo_registry import MIN_ANGLE
from skill_tools.servo_registry import PRIMARY_PORT_MAP
from skill_tools.servo_registry import resolve_port
from skill_tools.servo_registry import SAVED_POSITION_PORT_MAP

logger = logging.getLogger(__name__)

ARC_EXTENSION = 'arcskill'
ARC_MEDIA_TYPE = 'application/octet-stream'


def convert_dof_to_servo_config(dof_data: dict | None) -> dict:
    """DOFData -> ServoConfiguration keyed by ARC port."""
    if not dof_data:
        return {}

    servo_config = {}
    for servo_name, angle in dof_data.items():
        port = resolve_port(servo_name, PRIMARY_PORT_MAP, servo_config)
        servo_config[port] = {
            'Name': servo_name,
            'DefaultPosition': angle,
            'MinPosition': MIN_ANGLE,
            'MaxPosition': MAX_ANGLE,
            'Speed': AppConfig.ARC_DEFAULT_SPEED,
        }
    return servo_config


def convert_saved_positions(saved_positions: dict | None) -> dict:
    """SavedPositions -> {name: {ServoPositions: {port: angle}, Speed}}."""
    arc_positions = {}
    for position_name, dof_data in (saved_positions or {}).items():
        servo_positions = {}
        for servo_name, angle in dof_data.items():
            port = resolve_port(servo_name, SAVED_POSITION_PORT_MAP, servo_positions)
            servo_positions[port] = angle

        arc_positions[position_name] = {
            'ServoPositions': servo_positions,
            'Speed': AppConfig.ARC_DEFAULT_SPEED,
        }
    return arc_positions


def script_string(text: str) -> str:
    """Escape text for use inside a double-quoted script string literal."""
    return (
        str(text)
        .replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
    )


def generate_skill_script(skill_name: str, position_names, created: datetime | None = None) -> str:
    """
    Generate the ARC script that plays back saved positions in order.

    Main() loads each position and pauses ARC_POSITION_PAUSE_MS between
    loads; with no positions it only prints a message.
    """
    created = created or datetime.now()
    pause_ms = AppConfig.ARC_POSITION_PAUSE_MS
    position_names = list(position_names)
    # comment lines cannot hold line breaks
    header_name = ' '.join(str(skill_name).split())

    lines = [
        f'// Auto-generated script for {header_name}',
        f'// Created: {created.strftime("%Y-%m-%d %H:%M:%S")}',
        '',
        '// Initialize skill',
        'function Initialize() {',
        f'  Console.WriteLine("Initializing {script_string(skill_name)}...");',
        '}',
        '',
        '// Main skill function',
        'function Main() {',
    ]

    if position_names:
        lines.append('  // Load saved positions')
        for position_name in position_names:
            lines.append(f'  LoadPosition("{script_string(position_name)}");')
            lines.append(f'  Sleep({pause_ms}); // Wait {pause_ms} ms')
            lines.append('')
    else:
        lines.append('  Console.WriteLine("No saved positions to load.");')

    lines += [
        '  Console.WriteLine("Skill execution completed.");',
        '}',
        '',
        '// Helper function to load a position',
        'function LoadPosition(positionName) {',
        '  Console.WriteLine("Loading position: " + positionName);',
        '  Skill.LoadPosition(positionName);',
        '}',
        '',
    ]
    return '\n'.join(lines)


def build_arc_package(document, created: datetime | None = None) -> dict:
    """Build the ARC envelope for a SkillDocument."""
    saved_positions = document.saved_positions or {}
    return {
        'SkillName': document.skill_name,
        'Description': document.description or '',
        'Author': document.author or 'Unknown',
        'Version': AppConfig.ARC_PACKAGE_VERSION,
        'CreationDate': document.export_date or (created or datetime.now()).isoformat(),
        'ARCVersion': AppConfig.ARC_VERSION,
        'TargetController': AppConfig.ARC_TARGET_CONTROLLER,
        'RequiredPlugins': [],
        'CompatibleControllers': list(AppConfig.ARC_COMPATIBLE_CONTROLLERS),
        'ServoConfiguration': convert_dof_to_servo_config(document.dof_data),
        'SavedPositions': convert_saved_positions(saved_positions),
        'SkillScript': generate_skill_script(document.skill_name, saved_positions.keys(), created),
    }


def export_arc(document, download_name: str, created: datetime | None = None) -> ExportArtifact:
    package = build_arc_package(document, created)
    logger.debug(
        f"Built ARC package for '{document.skill_name}': "
        f"{len(package['ServoConfiguration'])} servos, {len(package['SavedPositions'])} positions"
    )
    return ExportArtifact(
        content=json.dumps(package, indent=2).encode('utf-8'),
        filename=f'{download_name}.{ARC_EXTENSION}',
        media_type=ARC_MEDIA_TYPE,
        extension=ARC_EXTENSION,
    )

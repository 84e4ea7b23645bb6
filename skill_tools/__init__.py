"""
skill_tools - robot skill DOF conversion, storage and export.

  servo_registry   channel names, angle range, ARC port tables
  pose_transform   landmark -> servo angle
  dof_aggregator   landmark set -> full DOF vector
  exporters        json / xml / csv serializers
  arc_exporter     ARC skill package builder
  repository       skill document storage
  artifacts        export files on disk
  skill_service    document and export operations
  jobs             background job interface (mocked)
"""
from skill_tools.dof_aggregator import convert_to_dof
from skill_tools.exporters import export_skill
from skill_tools.pose_transform import calculate_servo_angle

__all__ = [
    'calculate_servo_angle',
    'convert_to_dof',
    'export_skill',
]

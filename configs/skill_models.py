from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator
from typing_extensions import Annotated

Angle = Annotated[int, Field(ge=0, le=180, description="Servo angle in degrees")]
DOFVector = Dict[str, Angle]


class SkillFormat(str, Enum):
    JSON = "json"
    XML = "xml"
    ARCSKILL = "arcskill"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def media_type(self) -> str:
        return {
            SkillFormat.JSON: "application/json",
            SkillFormat.XML: "application/xml",
            SkillFormat.ARCSKILL: "application/octet-stream",
        }[self]


class DatabaseFormat(str, Enum):
    JSON = "json"
    XML = "xml"
    CSV = "csv"


def _lower_or_default(v, default):
    if v is None or v == "":
        return default
    if isinstance(v, str):
        return v.strip().lower()
    return v


class Landmark(BaseModel):
    """One pose-estimation landmark; x and y are normalised to [0, 1]."""
    id: Optional[int] = Field(default=None, description="Landmark index (MediaPipe pose numbering)")
    x: float = Field(description="Normalised horizontal position")
    y: float = Field(description="Normalised vertical position")
    z: float = Field(default=0.0, description="Signed depth relative to the hips")
    visibility: Optional[float] = Field(default=None, description="Detector confidence if available")

    model_config = {
        "allow_inf_nan": False,
    }


class MocapData(BaseModel):
    """A single frame of landmarks, keyed by id or given as a list."""
    landmarks: Optional[Union[Dict[int, Landmark], List[Landmark]]] = None

    model_config = {
        "extra": "allow",
    }

    def iter_landmarks(self) -> Iterator[Tuple[int, Landmark]]:
        if not self.landmarks:
            return
        if isinstance(self.landmarks, dict):
            yield from self.landmarks.items()
        else:
            for index, landmark in enumerate(self.landmarks):
                yield (landmark.id if landmark.id is not None else index), landmark


class SkillDocument(BaseModel):
    """
    The unit of persistence: identity, metadata, a primary DOF vector and
    named saved positions. Serialised with PascalCase keys.
    Unknown keys sent by clients (Version, Configuration, ...) are kept.
    """
    id: Optional[str] = Field(default=None, description="'{slug}_{epoch-ms}', assigned at creation")
    skill_name: str = Field(default="", alias="SkillName")
    description: str = Field(default="", alias="Description")
    author: str = Field(default="", alias="Author")
    export_date: Optional[str] = Field(default=None, alias="ExportDate")
    format: SkillFormat = Field(default=SkillFormat.JSON, alias="Format")
    dof_data: DOFVector = Field(default_factory=dict, alias="DOFData")
    saved_positions: Dict[str, DOFVector] = Field(default_factory=dict, alias="SavedPositions")

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
        "validate_assignment": True,
    }

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        return _lower_or_default(v, SkillFormat.JSON)

    @field_validator("skill_name", "description", "author", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("dof_data", "saved_positions", mode="before")
    @classmethod
    def none_as_empty_map(cls, v):
        return {} if v is None else v

    def to_record(self) -> dict:
        """JSON-ready dict with PascalCase keys, as stored on disk. Extra keys are kept as sent."""
        record = self.model_dump(by_alias=True, mode="json")
        for key in ("id", "ExportDate"):
            if record.get(key) is None:
                record.pop(key, None)
        return record


class SkillSummary(BaseModel):
    id: str
    name: str
    description: str
    export_date: str = Field(alias="exportDate")
    format: str
    author: str

    model_config = {
        "populate_by_name": True,
    }


class SavedPositionRequest(BaseModel):
    name: Optional[str] = None
    positions: Optional[DOFVector] = None


class DatabaseExportRequest(BaseModel):
    format: DatabaseFormat = DatabaseFormat.JSON
    include_positions: bool = Field(default=False, alias="includePositions")
    include_metadata: bool = Field(default=False, alias="includeMetadata")

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        return _lower_or_default(v, DatabaseFormat.JSON)


class DOFConvertRequest(BaseModel):
    mocap_data: Optional[MocapData] = Field(default=None, alias="mocapData")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "populate_by_name": True,
    }


class DOFExportMetadata(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    positions: Dict[str, DOFVector] = Field(default_factory=dict)
    frame_rate: float = Field(default=30, gt=0, alias="frameRate")
    loop: bool = False
    smoothing: float = Field(default=0.5, ge=0, le=1)

    model_config = {
        "populate_by_name": True,
        "extra": "allow",
    }


class DOFExportRequest(BaseModel):
    dof_data: Optional[DOFVector] = Field(default=None, alias="dofData")
    metadata: DOFExportMetadata = Field(default_factory=DOFExportMetadata)
    format: str = "json"

    model_config = {
        "populate_by_name": True,
    }

    @field_validator("metadata", mode="before")
    @classmethod
    def none_as_default(cls, v):
        return {} if v is None else v

    @field_validator("format", mode="before")
    @classmethod
    def normalize_format(cls, v):
        return _lower_or_default(v, "json")

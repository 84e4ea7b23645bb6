"""
exporters.py - Serialize skill documents to json, xml, arcskill and the
whole store to json, xml or csv.

Every exporter is a pure function of its input; writing files is left to
skill_tools.artifacts.

XML mapping is structural: dict keys become child elements, lists become
repeated elements with the same tag, scalars become text. Keys that are
not valid XML names (e.g. position names with spaces) are rewritten, and
lists of one element read back as scalars, so XML does not round-trip.
"""
from __future__ import annotations

import csv
import io
import json
import re
import xml.etree.ElementTree as ET
from datetime import datetime

from configs.skill_models import DatabaseFormat
from configs.skill_models import SkillFormat
from skill_tools.arc_exporter import export_arc
from skill_tools.errors import UnsupportedFormatError
from skill_tools.schemas import ExportArtifact

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
SKILL_XML_ROOT = 'ARCSkill'
DATABASE_XML_ROOT = 'Database'

CSV_HEADER = ('ID', 'Name', 'Description', 'Author', 'ExportDate', 'Format')

METADATA_KEYS = ('ExportDate', 'Author')
POSITIONS_KEY = 'SavedPositions'


# =============================================================================
# Naming helpers
# =============================================================================

def sanitize_name(name: str, default: str = 'skill') -> str:
    """Whitespace runs -> '_', then anything unsafe in a filename -> '_'."""
    slug = re.sub(r'\s+', '_', (name or '').strip())
    slug = re.sub(r'[^\w.-]', '_', slug)
    slug = slug.strip('.')
    return slug or default


def timestamp_slug(now: datetime | None = None) -> str:
    """ISO timestamp with ':' and '.' replaced, safe for filenames."""
    now = now or datetime.now()
    return re.sub(r'[:.]', '-', now.isoformat(timespec='milliseconds'))


def coerce_format(fmt, enum_cls, default):
    """Parse a format name case-insensitively; None/'' gives the default."""
    if fmt is None or fmt == '':
        return default
    if isinstance(fmt, enum_cls):
        return fmt
    try:
        return enum_cls(str(fmt).strip().lower())
    except ValueError:
        raise UnsupportedFormatError(str(fmt)) from None


def xml_tag(key) -> str:
    tag = re.sub(r'[^\w.-]', '_', str(key))
    if not tag or not re.match(r'[^\W\d]', tag):
        tag = f'_{tag}'
    return tag


# =============================================================================
# XML
# =============================================================================

def _fill_element(element, value):
    if isinstance(value, dict):
        for key, child in value.items():
            _append_value(element, key, child)
    elif value is None:
        return
    elif isinstance(value, bool):
        element.text = 'true' if value else 'false'
    else:
        element.text = str(value)


def _append_value(parent, key, value):
    if isinstance(value, (list, tuple)):
        for item in value:
            _append_value(parent, key, item)
        return
    _fill_element(ET.SubElement(parent, xml_tag(key)), value)


def to_xml(data: dict, root_name: str) -> str:
    """Serialize a JSON-like dict under a single root element."""
    root = ET.Element(xml_tag(root_name))
    _fill_element(root, data)
    ET.indent(root, space='  ')
    return f'{XML_DECLARATION}\n{ET.tostring(root, encoding="unicode")}\n'


# =============================================================================
# Single skill export
# =============================================================================

def export_json(document, download_name: str) -> ExportArtifact:
    return ExportArtifact(
        content=json.dumps(document.to_record(), indent=2).encode('utf-8'),
        filename=f'{download_name}.json',
        media_type=SkillFormat.JSON.media_type,
        extension=SkillFormat.JSON.extension,
    )


def export_xml(document, download_name: str) -> ExportArtifact:
    return ExportArtifact(
        content=to_xml(document.to_record(), SKILL_XML_ROOT).encode('utf-8'),
        filename=f'{download_name}.xml',
        media_type=SkillFormat.XML.media_type,
        extension=SkillFormat.XML.extension,
    )


def export_skill(document, fmt=None, created: datetime | None = None) -> ExportArtifact:
    """
    Export a SkillDocument in the given format (defaults to its own Format).

    Args:
        document: SkillDocument
        fmt: 'json', 'xml', 'arcskill' or a SkillFormat
        created: timestamp used in the ARC script header

    Returns:
        ExportArtifact with bytes and a suggested download filename

    Raises:
        UnsupportedFormatError: for any other format
    """
    fmt = coerce_format(fmt, SkillFormat, document.format)
    download_name = sanitize_name(document.skill_name)
    if fmt == SkillFormat.XML:
        return export_xml(document, download_name)
    if fmt == SkillFormat.ARCSKILL:
        return export_arc(document, download_name, created)
    return export_json(document, download_name)


# =============================================================================
# Database export
# =============================================================================

def filter_record(record: dict, include_positions: bool, include_metadata: bool) -> dict:
    """Copy of a stored record without positions and/or metadata."""
    record = dict(record)
    if not include_positions:
        record.pop(POSITIONS_KEY, None)
    if not include_metadata:
        for key in METADATA_KEYS:
            record.pop(key, None)
    return record


def records_to_csv(records: list[dict]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for record in records:
        writer.writerow([
            record.get('id', ''),
            record.get('SkillName', ''),
            record.get('Description', ''),
            record.get('Author', ''),
            record.get('ExportDate', ''),
            record.get('Format') or 'json',
        ])
    return buffer.getvalue()


def export_database(records: list[dict], fmt, now: datetime | None = None) -> ExportArtifact:
    """
    Serialize a list of (already filtered) records as one artifact.

    json -> {"skills": [...]}, xml -> <Database><skills>...</skills>...</Database>,
    csv  -> one summary row per skill.
    """
    fmt = coerce_format(fmt, DatabaseFormat, DatabaseFormat.JSON)
    base_name = f'database_export_{timestamp_slug(now)}'
    if fmt == DatabaseFormat.XML:
        content = to_xml({'skills': records}, DATABASE_XML_ROOT)
        media_type = 'application/xml'
    elif fmt == DatabaseFormat.CSV:
        content = records_to_csv(records)
        media_type = 'text/csv'
    else:
        content = json.dumps({'skills': records}, indent=2)
        media_type = 'application/json'

    return ExportArtifact(
        content=content.encode('utf-8'),
        filename=f'{base_name}.{fmt.value}',
        media_type=media_type,
        extension=fmt.value,
    )


def media_type_for_filename(filename: str) -> str:
    """Content type for a file in the exports directory."""
    if filename.endswith('.xml'):
        return 'application/xml'
    if filename.endswith('.csv'):
        return 'text/csv'
    if filename.endswith('.arcskill'):
        return 'application/octet-stream'
    return 'application/json'

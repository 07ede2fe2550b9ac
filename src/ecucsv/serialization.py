"""
Serialization helpers for extracted records and batch reports.

Provides JSON/YAML output via an intermediate dict representation, and
reading extracted records back from that dict.
This module intentionally keeps serialization structure stable and explicit.
"""
from __future__ import annotations

import json
from typing import Any, Dict

import yaml

from ecucsv.model import (
    BatchReport,
    ConversionMode,
    ExtractedRecords,
    FileOutcome,
    LabelSeries,
    OutcomeStatus,
)


def series_to_dict(s: LabelSeries) -> Dict[str, Any]:
    return {"name": s.name, "values": list(s.values)}


def series_from_dict(d: Dict[str, Any]) -> LabelSeries:
    return LabelSeries(name=d["name"], values=list(d.get("values", [])))


def records_to_dict(r: ExtractedRecords) -> Dict[str, Any]:
    return {
        "scalars": dict(r.scalars),
        "series": [series_to_dict(s) for s in r.series],
    }


def records_from_dict(d: Dict[str, Any]) -> ExtractedRecords:
    return ExtractedRecords(
        scalars=dict(d.get("scalars", {})),
        series=[series_from_dict(s) for s in d.get("series", [])],
    )


def records_to_json(r: ExtractedRecords) -> str:
    # Key order is meaningful (it is the CSV row order), so no sort_keys
    return json.dumps(records_to_dict(r), indent=2)


def records_from_json(s: str) -> ExtractedRecords:
    return records_from_dict(json.loads(s))


def records_to_yaml(r: ExtractedRecords) -> str:
    return yaml.safe_dump(records_to_dict(r), sort_keys=False)


def records_from_yaml(s: str) -> ExtractedRecords:
    return records_from_dict(yaml.safe_load(s))


def outcome_to_dict(o: FileOutcome) -> Dict[str, Any]:
    return {
        "source": o.source,
        "mode": o.mode.value,
        "status": o.status.value,
        "output": o.output,
        "error": o.error,
        "error_kind": o.error_kind,
    }


def outcome_from_dict(d: Dict[str, Any]) -> FileOutcome:
    return FileOutcome(
        source=d["source"],
        mode=ConversionMode(d["mode"]),
        status=OutcomeStatus(d["status"]),
        output=d.get("output"),
        error=d.get("error"),
        error_kind=d.get("error_kind"),
    )


def report_to_dict(r: BatchReport) -> Dict[str, Any]:
    return {
        "mode": r.mode.value,
        "converted": r.converted,
        "skipped": r.skipped,
        "failed": r.failed,
        "outcomes": [outcome_to_dict(o) for o in r.outcomes],
    }


def report_to_json(r: BatchReport) -> str:
    return json.dumps(report_to_dict(r), indent=2)


def report_to_yaml(r: BatchReport) -> str:
    return yaml.safe_dump(report_to_dict(r), sort_keys=False)

import warnings
from pathlib import Path

from hltas_core import Document, HLTASError


def _error_entry(exc: HLTASError) -> dict:
    entry = {"code": exc.code.name, "message": exc.description.message, "line": exc.line_number}
    if exc.source_line is not None:
        entry["source"] = exc.source_line
    return entry


def verify_script(script_path: Path) -> dict:
    """Parse a script and report the outcome as a JSON-ready dict."""
    errors = []
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            doc = Document.from_path(script_path)
        except HLTASError as e:
            errors.append(_error_entry(e))
            return {"status": "FAIL", "error_count": len(errors), "errors": errors}

    frames = doc.frames()
    return {
        "status": "PASS",
        "error_count": 0,
        "errors": [],
        "warnings": [str(w.message) for w in caught],
        "version": doc.version,
        "properties": len(doc.properties()),
        "frames": len(frames),
        "bulks": sum(1 for f in frames if f.is_movement),
        "total_repeats": sum(f.bulk.repeats for f in frames if f.is_movement),
    }

"""Frame table export.

One row per frame, in script order, written to Parquet with an explicit schema.
"""
from __future__ import annotations

from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from hltas_core import Document, FrameBulk
from hltas_core import protocol as P
from hltas_core.write import encode_autofuncs, encode_line, encode_target

FRAME_SCHEMA = pa.schema(
    [
        ("position", pa.int32()),
        ("kind", pa.string()),
        ("first_frame", pa.int64()),
        ("repeats", pa.int64()),
        ("strafe_type", pa.string()),
        ("strafe_dir", pa.string()),
        ("target", pa.string()),
        ("autofuncs", pa.string()),
        ("frame_time", pa.string()),
        ("pitch", pa.float64()),
        ("commands", pa.string()),
        ("comments", pa.string()),
        ("line", pa.string()),
    ]
)

_KINDS = {
    "Save": P.SAVE,
    "SharedSeed": P.SEED,
    "Buttons": P.BUTTONS,
    "LgagstMinSpeed": P.LGAGST_MIN_SPEED,
    "Reset": P.RESET,
    "Strafing": P.STRAFING,
    "TargetYaw": P.TARGET_YAW,
    "Change": P.CHANGE,
    "TargetYawOverride": P.TARGET_YAW_OVERRIDE,
}


def frames_dataframe(doc: Document) -> pd.DataFrame:
    rows: list[dict] = []
    first_frame = 0
    for i, frame in enumerate(doc.frames()):
        line = frame.line
        row = {
            "position": i,
            "kind": "frame_bulk" if isinstance(line, FrameBulk) else _KINDS[type(line).__name__],
            "first_frame": first_frame,
            "repeats": 0,
            "strafe_type": "",
            "strafe_dir": "",
            "target": "",
            "autofuncs": "",
            "frame_time": "",
            "pitch": float("nan"),
            "commands": "",
            "comments": frame.comments,
            "line": encode_line(line),
        }
        if isinstance(line, FrameBulk):
            if line.strafe is not None:
                row["strafe_type"] = line.strafe.type.name.lower()
                row["strafe_dir"] = line.strafe.dir.name.lower()
            row.update(
                repeats=line.repeats,
                target=encode_target(line.target),
                autofuncs=encode_autofuncs(line),
                frame_time=line.frame_time,
                pitch=float("nan") if line.pitch is None else line.pitch,
                commands=line.commands,
            )
            first_frame += line.repeats
        rows.append(row)
    return pd.DataFrame(rows, columns=FRAME_SCHEMA.names)


def write_frames_parquet(doc: Document, out_path: Path) -> None:
    """Write the frame table of ``doc`` to ``out_path``. Nothing is written for an empty document."""
    df = frames_dataframe(doc)
    if df.empty:
        return

    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    table = pa.Table.from_pandas(df, schema=FRAME_SCHEMA, preserve_index=False)
    pq.write_table(table, Path(out_path))

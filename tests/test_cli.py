import json
import os
import subprocess
import sys
from pathlib import Path

import pandas as pd
from click.testing import CliRunner

from hltas_compile.cli import main as compile_main
from hltas_core import ErrorCode
from hltas_verify.cli import main as verify_main

REPO = Path(__file__).resolve().parents[1]
DATA = REPO / "tests" / "data"
BHOP = DATA / "parse" / "bhop.hltas"


def test_verify_pass():
    r = CliRunner().invoke(verify_main, ["script", str(BHOP)])
    assert r.exit_code == 0, r.output
    result = json.loads(r.output)
    assert result["status"] == "PASS"
    assert result["frames"] == 7
    assert result["bulks"] == 7
    assert result["total_repeats"] == 1 + 5 + 400 + 2951 + 1 + 5315 + 1
    assert result["warnings"] == []


def test_verify_fail_exit_code_is_error_code():
    r = CliRunner().invoke(verify_main, ["script", str(DATA / "error" / "no-yaw.hltas")])
    assert r.exit_code == int(ErrorCode.NOYAW)
    result = json.loads(r.output)
    assert result["status"] == "FAIL"
    assert result["error_count"] == 1
    assert result["errors"][0]["code"] == "NOYAW"
    assert result["errors"][0]["line"] == 6


def test_verify_missing_file():
    r = CliRunner().invoke(verify_main, ["script", str(DATA / "error" / "does-not-exist.hltas")])
    assert r.exit_code == int(ErrorCode.FAILOPEN)
    assert json.loads(r.output)["errors"][0]["code"] == "FAILOPEN"


def test_verify_reports_warnings(tmp_path):
    path = tmp_path / "legacy.hltas"
    path.write_text("version 1\nframes\n----------xyz|------|------|0.001|-|-|1\n")
    r = CliRunner().invoke(verify_main, ["script", str(path)])
    assert r.exit_code == 0, r.output
    warnings = json.loads(r.output)["warnings"]
    assert len(warnings) == 1
    assert "trailing characters" in warnings[0]


def test_compile_rewrites_canonically(tmp_path):
    out = tmp_path / "out.hltas"
    r = CliRunner().invoke(compile_main, [str(BHOP), str(out)])
    assert r.exit_code == 0, r.output
    assert out.read_text() == BHOP.read_text()


def test_compile_split_and_table(tmp_path):
    out = tmp_path / "out.hltas"
    table = tmp_path / "tables" / "frames.parquet"
    r = CliRunner().invoke(compile_main, [str(BHOP), str(out), "--split", "2", "100", "--table", str(table)])
    assert r.exit_code == 0, r.output
    assert "s03-------|------|------|0.001|170|0|100\ns03-------|------|------|0.001|170|0|300\n" in out.read_text()
    df = pd.read_parquet(table)
    assert len(df) == 8
    assert df["repeats"].sum() == 8674


def test_compile_fails_closed(tmp_path):
    r = CliRunner().invoke(compile_main, [str(DATA / "error" / "both-j-d.hltas"), str(tmp_path / "out.hltas")])
    assert r.exit_code == int(ErrorCode.BOTHAJDT)
    assert r.output.startswith("FATAL: BOTHAJDT")
    assert len(r.output.strip().splitlines()) == 1
    assert not (tmp_path / "out.hltas").exists()


def test_compile_bad_split_is_a_usage_error(tmp_path):
    r = CliRunner().invoke(compile_main, [str(BHOP), str(tmp_path / "out.hltas"), "--split", "0", "1"])
    assert r.exit_code == 2


def test_compile_table_write_failure_fails_closed(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    r = CliRunner().invoke(compile_main, [str(BHOP), str(tmp_path / "out.hltas"), "--table", str(blocker / "t.parquet")])
    assert r.exit_code == int(ErrorCode.FAILWRITE)
    assert r.output.startswith("FATAL: ")
    assert len(r.output.strip().splitlines()) == 1


def test_verify_as_module():
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(REPO / "src"), env.get("PYTHONPATH")]))
    r = subprocess.run(
        [sys.executable, "-m", "hltas_verify.cli", "script", str(DATA / "error" / "no-save-name.hltas")],
        cwd=REPO,
        env=env,
        check=False,
        capture_output=True,
        text=True,
    )
    assert r.returncode == int(ErrorCode.NOSAVENAME), r.stderr + r.stdout
    assert json.loads(r.stdout)["errors"][0]["code"] == "NOSAVENAME"

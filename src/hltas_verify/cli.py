import json
import logging
from pathlib import Path

import click

from hltas_core import ErrorCode
from .logic import verify_script

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="HLTAS_LOG_LEVEL",
    show_default=True,
)
def main(log_level: str):
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")


@main.command("script")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
def script_cmd(path: Path):
    """Parse PATH and print the verification result as JSON."""
    result = verify_script(path)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["errors"]:
        # Exit status is the numeric error code of the first failure.
        raise SystemExit(int(ErrorCode[result["errors"][0]["code"]]))


if __name__ == "__main__":
    main()

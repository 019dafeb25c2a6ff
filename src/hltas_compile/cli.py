"""HLTAS compiler - rewrite a script in canonical form."""
from __future__ import annotations

import logging
from pathlib import Path

import click

from hltas_core import Document, ErrorCode, HLTASError
from hltas_compile.tables import write_frames_parquet

logger = logging.getLogger(__name__)


def compile_script(
    script_path: Path,
    out_path: Path,
    table_path: Path | None = None,
    split: tuple[int, int] | None = None,
) -> Document:
    """Load a script, optionally split one bulk, and write it back out."""
    doc = Document.from_path(script_path)

    if split is not None:
        index, offset = split
        try:
            doc.split_bulk(index, offset)
        except (ValueError, IndexError) as e:
            raise click.BadParameter(str(e), param_hint="--split") from e

    doc.save(out_path)
    if table_path is not None:
        write_frames_parquet(doc, table_path)

    logger.info("compiled %s -> %s (%d frames)", script_path, out_path, len(doc))
    return doc


@click.command()
@click.argument("script", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("out", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--table", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Also write the frame table to this Parquet file")
@click.option("--split", nargs=2, type=int, default=None, metavar="INDEX OFFSET",
              help="Split the bulk at INDEX after OFFSET repeats")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default="WARNING", envvar="HLTAS_LOG_LEVEL", show_default=True)
def main(script: Path, out: Path, table: Path | None, split: tuple[int, int] | None, log_level: str) -> None:
    """Rewrite SCRIPT into OUT."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    try:
        compile_script(script, out, table_path=table, split=split)
    except HLTASError as e:
        # Fail closed with a single-line reason.
        click.echo(f"FATAL: {str(e).splitlines()[0]}")
        raise SystemExit(int(e.code))
    except click.ClickException:
        raise
    except Exception as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(int(ErrorCode.FAILWRITE))


if __name__ == "__main__":
    main()

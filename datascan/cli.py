"""CLI interface for datascan."""

import sys
from pathlib import Path

import click

from datascan.cache import ResultCache, format_timestamp
from datascan.config import Config
from datascan.errors import DatascanError
from datascan.logs import configure_logging
from datascan.scanner import DatasetScanner
from datascan.scanner.progress import format_bytes


@click.group()
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding the cache files and the abort file (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, base_dir: Path | None) -> None:
    ctx.ensure_object(dict)
    ctx.obj["config"] = Config.for_directory(base_dir) if base_dir else Config()


@cli.command()
@click.argument("input_path", type=click.Path(path_type=Path))
@click.option("-o", "--output", type=click.Path(file_okay=False, path_type=Path), help="Directory for output files")
@click.option("-r", "--recurse", is_flag=True, help="Search subdirectories for datasets")
@click.option("--max-levels", type=int, default=0, help="Maximum directory depth to recurse (0 = unlimited)")
@click.option("--no-cache", is_flag=True, help="Do not read or update the cache files")
@click.option("--reprocess", is_flag=True, help="Reprocess datasets already in the cache")
@click.option("--reprocess-zero", is_flag=True, help="Reprocess cached datasets whose size is zero")
@click.option("--check-integrity", is_flag=True, help="Check file integrity in each directory")
@click.option("--compute-hashes", is_flag=True, help="Compute SHA-1 hashes during integrity checks")
@click.option("--force-integrity-recheck", is_flag=True, help="Recheck directories already checked")
@click.option("--no-instrument-hash", is_flag=True, help="Skip hashing instrument files")
@click.option("--dataset-info", is_flag=True, help="Write a DatasetInfo XML file per dataset")
@click.option("--stats-file", is_flag=True, help="Append each dataset to the dataset stats text file")
@click.option("--dataset-id", type=int, default=0, help="Dataset ID to record")
@click.option("--all-extensions", is_flag=True, help="Process files with any extension when recursing")
@click.option("--recursion-errors-fatal", is_flag=True, help="Stop the walk when a directory fails")
@click.option("--status-file", type=click.Path(dir_okay=False, path_type=Path), help="Write processing status XML here")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Also write log messages to this file")
@click.option("--debug", is_flag=True, help="Show debug log messages")
@click.pass_context
def scan(
    ctx: click.Context,
    input_path: Path,
    output: Path | None,
    recurse: bool,
    max_levels: int,
    no_cache: bool,
    reprocess: bool,
    reprocess_zero: bool,
    check_integrity: bool,
    compute_hashes: bool,
    force_integrity_recheck: bool,
    no_instrument_hash: bool,
    dataset_info: bool,
    stats_file: bool,
    dataset_id: int,
    all_extensions: bool,
    recursion_errors_fatal: bool,
    status_file: Path | None,
    log_file: Path | None,
    debug: bool,
) -> None:
    """Extract metadata from a dataset file, directory, wildcard or directory tree."""
    config: Config = ctx.obj["config"]
    configure_logging("DEBUG" if debug else "INFO", log_file)

    config.cache.enabled = not no_cache
    config.scanner.reprocess_existing = reprocess
    config.scanner.reprocess_if_cached_size_zero = reprocess_zero
    config.scanner.process_all_extensions = all_extensions
    config.scanner.recursion_errors_fatal = recursion_errors_fatal
    config.scanner.compute_instrument_hashes = not no_instrument_hash
    config.scanner.create_dataset_info_file = dataset_info
    config.scanner.update_dataset_stats_file = stats_file
    config.scanner.dataset_id = dataset_id
    config.scanner.status_file_path = status_file
    config.integrity.enabled = check_integrity
    config.integrity.compute_file_hashes = compute_hashes
    config.integrity.force_recheck = force_integrity_recheck

    try:
        with DatasetScanner(config) as scanner:
            success = scanner.scan(input_path, output, recurse=recurse, max_levels=max_levels)
    except DatascanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)

    if not success:
        click.echo(f"Error: {scanner.error_code.message}: {input_path}", err=True)
        sys.exit(1)
    if scanner.stats.datasets_seen == 0 and not scanner.abort.aborted:
        click.echo(f"Error: no datasets were recognized in {input_path}", err=True)
        sys.exit(1)
    if scanner.save_failed and config.integrity.enabled:
        click.echo("Error: cached results could not be saved", err=True)
        sys.exit(1)


@cli.command()
@click.option("--directories", is_flag=True, help="List directory integrity results instead of datasets")
@click.pass_context
def cache(ctx: click.Context, directories: bool) -> None:
    """List the contents of the cache files."""
    config: Config = ctx.obj["config"]
    result_cache = ResultCache(config.cache)
    result_cache.load()

    if directories:
        _show_directories(result_cache)
    else:
        _show_datasets(result_cache)


def _show_datasets(result_cache: ResultCache) -> None:
    rows = sorted(result_cache.datasets, key=lambda row: row.dataset_name)
    if not rows:
        click.echo(f"No cached datasets found in {result_cache.datasets.path}")
        return

    click.echo("\nCached Datasets:")
    click.echo("-" * 80)
    header = "Dataset".ljust(35) + "Ext".ljust(8) + "Scans".rjust(8) + "Size".rjust(12)
    header += "  " + "Acquired".ljust(19)
    click.echo(header)
    click.echo("-" * 80)

    for row in rows:
        click.echo(
            f"{_truncate(row.dataset_name, 34):<35}"
            f"{row.file_extension:<8}"
            f"{row.scan_count:>8,}"
            f"{format_bytes(row.file_size_bytes):>12}"
            f"  {format_timestamp(row.acq_time_start):<19}"
        )


def _show_directories(result_cache: ResultCache) -> None:
    rows = sorted(result_cache.directories, key=lambda row: row.directory_id)
    if not rows:
        click.echo(f"No cached directories found in {result_cache.directories.path}")
        return

    click.echo("\nDirectory Integrity:")
    click.echo("-" * 80)
    click.echo("ID".rjust(6) + "  " + "Directory".ljust(50) + "Files".rjust(10) + "Failed".rjust(10))
    click.echo("-" * 80)

    for row in rows:
        click.echo(
            f"{row.directory_id:>6}  "
            f"{_truncate(row.directory_path, 49):<50}"
            f"{row.file_count:>10,}"
            f"{row.file_count_fail_integrity:>10,}"
        )


@cli.command()
@click.pass_context
def abort(ctx: click.Context) -> None:
    """Ask a running scan in the base directory to stop."""
    config: Config = ctx.obj["config"]
    assert config.abort_file_path is not None
    config.abort_file_path.parent.mkdir(parents=True, exist_ok=True)
    config.abort_file_path.touch()
    click.echo(f"Created {config.abort_file_path}")


def _truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return "..." + text[-(length - 3) :]


def main() -> None:
    """Entry point for the CLI."""
    cli(standalone_mode=True)  # pylint: disable=no-value-for-parameter


if __name__ == "__main__":
    main()

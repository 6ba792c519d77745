import asyncio
import json
import logging
import sys

import click
from dotenv import load_dotenv

from verscan.config import AuditSettings
from verscan.errors import MalformedVersionError
from verscan.inventory import resolve_host_list
from verscan.services.fleet_collector import FleetCollector

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger("verscan")


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='[%(levelname)s] %(message)s'
    )
    # 외부 라이브러리 로그 줄이기
    logging.getLogger("asyncssh").setLevel(logging.WARNING)


def print_progress(host: str, completed: int, total: int, percent: int):
    click.echo(f"[{percent:3d}%] {completed}/{total} {host}", err=True)


@click.command("verscan")
@click.option("--host", "-H", "hosts", multiple=True, help="Target host (repeatable)")
@click.option("--hosts-file", type=click.Path(exists=True, dir_okay=False), help="File with one host per line")
@click.option("--minimum-version", default=None, help="Required minimum version (default: profile baseline)")
@click.option("--profile", "profile_name", default=None, help="Product profile name")
@click.option("--concurrency", type=click.IntRange(min=1), default=None, help="Hosts probed in parallel")
@click.option("--timeout", "host_timeout", type=float, default=None, help="Per-host probe timeout in seconds")
@click.option("--unify-failures", is_flag=True, help="Record placeholders for hosts that fail mid-probe")
@click.option("--json", "as_json", is_flag=True, help="Print records and summary as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def cli(hosts, hosts_file, minimum_version, profile_name, concurrency, host_timeout,
        unify_failures, as_json, verbose) -> None:
    """Audit installed product versions across a fleet of hosts."""
    setup_logging(verbose)

    try:
        settings = AuditSettings.from_env()
        if profile_name:
            settings.profile_name = profile_name
        if minimum_version:
            settings.minimum_version = minimum_version
        if concurrency:
            settings.max_concurrent = concurrency
        if host_timeout:
            settings.host_timeout = host_timeout
        if unify_failures:
            settings.placeholder_on_transport_error = True

        collector = FleetCollector.from_settings(settings)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    targets = resolve_host_list(list(hosts) + settings.extra_hosts, hosts_file)
    if not as_json:
        collector.set_on_progress(print_progress)

    try:
        records = asyncio.run(collector.collect_all(targets, settings.effective_minimum_version))
    except MalformedVersionError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    summary = collector.last_summary

    if as_json:
        click.echo(json.dumps({
            "records": [r.model_dump(mode="json") for r in records],
            "summary": summary.to_dict(),
        }, ensure_ascii=False, indent=2))
        return

    for record in records:
        status = "PASS" if record.validation_passed else "FAIL"
        versions = ", ".join(f"{k}={v}" for k, v in record.versions.items())
        click.echo(f"{status}  {record.host_identifier}  [{record.install_check.value}]  {versions}")
        for warning in record.warnings:
            click.echo(f"      ! {warning}")

    click.echo(
        f"\n{summary.processed}/{summary.total} hosts processed, "
        f"{summary.passed} passed, {summary.not_installed} not installed, "
        f"{summary.unreachable} unreachable, {summary.failed} failed"
    )
    for outcome in collector.last_outcomes:
        if outcome.status == "failed":
            click.echo(f"  failed: {outcome.host} ({outcome.error})")


if __name__ == "__main__":
    cli()

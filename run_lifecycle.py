"""
Helpdesk demo-data runner.
Provisions organizations, users and tickets for load/demo testing, and
reclaims them afterwards.

Run from the project checkout so configs/ and envs/ resolve:
    python run_lifecycle.py provision --count 5
    python run_lifecycle.py reclaim --strategy run --run-id nodegen-1700000000000
"""
import argparse
import getpass
import sys

from demo_lifecycle.config import STRATEGIES, load_pipeline_settings
from demo_lifecycle.errors import ProvisioningAborted
from demo_lifecycle.pipeline import run_provision, run_reclaim
from demo_lifecycle.report import format_abort, format_provision_report, format_reclaim_report


def _prompt(question: str) -> str:
    if "token" in question.lower():
        return getpass.getpass(question)
    return input(question)


def _print(lines):
    for line in lines:
        print(line)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Provision or reclaim helpdesk demo data")
    parser.add_argument("--tenant-id", type=int, default=1)
    parser.add_argument("--credentials-file", default="configs/credential.json")
    parser.add_argument("--config-file", default="configs/config.json")
    parser.add_argument("--prompt", action="store_true", help="Ask for missing credentials interactively")
    sub = parser.add_subparsers(dest="command", required=True)

    provision = sub.add_parser("provision", help="Create organizations, users and tickets")
    provision.add_argument("--count", type=int, default=None, help="Entities per type (default from config)")
    provision.add_argument("--run-id", default=None, help="Explicit run identity instead of a timestamped one")
    provision.add_argument("--output-mode", default="file", choices=["file", "log"], help="Manifest sink to use")

    reclaim = sub.add_parser("reclaim", help="Delete entities created by earlier runs")
    reclaim.add_argument("--strategy", choices=STRATEGIES, default=None,
                         help="Classification strategy (required unless reclaim.strategy is configured)")
    reclaim.add_argument("--run-id", default=None, help="Run identity for the run and manifest strategies")

    args = parser.parse_args(argv)

    settings = load_pipeline_settings(
        tenant_id=args.tenant_id,
        config_file=args.config_file,
        credentials_file=args.credentials_file,
        prompt=_prompt if args.prompt else None,
    )
    settings.config_loader.setup_logging()
    if settings.config_loader.is_debug_mode():
        _print(settings.config_loader.summary_lines())

    if args.command == "provision":
        try:
            report = run_provision(settings, count=args.count, run_label=args.run_id, output_mode=args.output_mode)
        except ProvisioningAborted as exc:
            _print(format_abort(exc))
            return 1
        _print(format_provision_report(report))
        return 0

    strategy = args.strategy or settings.reclaim.strategy
    if not strategy:
        parser.error("--strategy is required (run, heuristic or manifest)")
    if strategy in ("run", "manifest") and not args.run_id:
        parser.error(f"--run-id is required with the {strategy} strategy")
    try:
        report = run_reclaim(settings, strategy=strategy, run_label=args.run_id)
    except FileNotFoundError as exc:
        parser.error(str(exc))
    _print(format_reclaim_report(report))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""
media-matrix CLI - score questionnaires and inspect the scoring configuration.

Usage:
    # Score a flat answer form (YAML or JSON) for a category
    media-matrix score answers.yaml --category portal_blog

    # Same, as JSON on stdout
    media-matrix score answers.json --category tv_bundle --json

    # Show how a category distributes its weight
    media-matrix weights --category youtube_bundle

    # Validate the catalog and weight tables
    media-matrix check
"""

import argparse
import json
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from media_matrix import __version__
from media_matrix.config import get_log_level
from media_matrix.errors import ConfigurationError
from media_matrix.schemas.enums import ProposalCategory
from media_matrix.schemas.proposal import Proposal
from media_matrix.scorers.criteria_catalog import catalog_issues, get_catalog
from media_matrix.scorers.weight_registry import get_weight_tables
from media_matrix.services.proposal_service import submit
from media_matrix.services.tv_delivery import tv_delivery
from media_matrix.utils.logger import EngineLogger, configure_logging
from media_matrix.utils.report_generator import block_scores, breakdown, score_band, weight_tiers

console = Console()


def _load_form(path: Path) -> dict:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} does not contain a mapping of answers")
    return data


def cmd_score(args: argparse.Namespace, logger: EngineLogger) -> int:
    """Score an answer form and print the breakdown."""
    path = Path(args.file)
    if not path.exists():
        console.print(f"[red]File not found: {args.file}[/red]")
        return 1
    try:
        form = _load_form(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.error("Could not read answer form", exception=e, file=path.name)
        console.print(f"[red]Could not read {args.file}: {e}[/red]")
        return 1

    try:
        proposal = Proposal(name=path.stem, category=args.category, investment=args.investment)
    except ValidationError as e:
        logger.error("Invalid proposal", exception=e, file=path.name)
        console.print(f"[red]Invalid proposal: {e.errors()[0]['msg']}[/red]")
        return 1

    with logger.timed("scoring", file=path.name, category=proposal.category.value):
        version = submit(proposal, form)
    rows = breakdown(version, proposal.category)

    if args.json:
        payload = {
            "category": proposal.category.value,
            "total_score": version.total_score,
            "band": score_band(version.total_score),
            "cost_per_score": proposal.cost_per_score(),
            "criteria": [
                {
                    "id": row.criterion_id,
                    "raw_score": row.raw_score,
                    "matched_label": row.matched_label,
                    "weight": row.weight,
                    "weighted_score": row.weighted_score,
                }
                for row in rows
            ],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        return 0

    table = Table(title=f"{proposal.category.label} - {path.name}")
    table.add_column("Criterion")
    table.add_column("Score", justify="right")
    table.add_column("Answer")
    table.add_column("Weight", justify="right")
    table.add_column("Weighted", justify="right")
    for row in rows:
        table.add_row(
            row.label,
            f"{row.raw_score:g}",
            row.matched_label,
            f"{row.weight:.2%}",
            f"{row.weighted_score:.4f}",
        )
    console.print(table)

    blocks = "  ".join(f"{name}: {score:.2f}" for name, score in block_scores(version, proposal.category).items())
    summary = [f"[bold]Total: {version.total_score:.2f}/3[/bold] ({score_band(version.total_score)})", blocks]
    if proposal.cost_per_score() is not None:
        summary.append(f"Cost per score point: R$ {proposal.cost_per_score():,.2f}")
    if proposal.category == ProposalCategory.TV_BUNDLE:
        delivery = tv_delivery(version.answers)
        summary.append(f"TV: {delivery.total_spots:,} spots, {delivery.total_hours:.2f}h on air")
    console.print(Panel("\n".join(summary)))
    return 0


def cmd_weights(args: argparse.Namespace, logger: EngineLogger) -> int:
    """Print a category's weight tiers."""
    category = ProposalCategory.parse(args.category)
    table_config = get_weight_tables()[category]
    tiers = weight_tiers(category)

    console.print(f"[bold]{category.label}[/bold] - {table_config.title}")
    if table_config.description:
        console.print(f"[dim]{table_config.description}[/dim]")
    for title, items in (
        ("High impact (>= 8%)", tiers.high),
        ("Medium impact (3-8%)", tiers.medium),
        ("Low impact (< 3%)", tiers.low),
    ):
        if not items:
            continue
        table = Table(title=title)
        table.add_column("Criterion")
        table.add_column("Weight", justify="right")
        for label, weight in items:
            table.add_row(label, f"{weight:.1%}")
        console.print(table)
    return 0


def cmd_check(args: argparse.Namespace, logger: EngineLogger) -> int:
    """Validate catalog and weight tables; report range gaps and overlaps."""
    catalog = get_catalog()
    tables = get_weight_tables()
    console.print(f"Catalog {catalog.version or '(unversioned)'}: {len(catalog)} criteria")
    for category, table in tables.items():
        applicable = len(catalog.applicable_criteria(category))
        console.print(f"  {category.value}: {len(table.weights)}/{applicable} weighted, sum={table.total:.4f}")

    issues = catalog_issues(catalog)
    for issue in issues:
        logger.warning("Catalog range issue", detail=issue)
        console.print(f"[yellow]{issue}[/yellow]")
    if issues:
        console.print(f"[red]{len(issues)} issue(s) found[/red]")
        return 1
    console.print("[green]OK[/green]")
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="media-matrix",
        description="Score media-buy proposals against the evaluation matrix",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Logging level (default: MEDIA_MATRIX_LOG_LEVEL or INFO)")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file under the log directory")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # score command
    score_parser = subparsers.add_parser("score", help="Score an answer form (YAML or JSON)")
    score_parser.add_argument("file", help="Path to the flat answer form")
    score_parser.add_argument("--category", required=True, help="Proposal category (e.g. portal_blog)")
    score_parser.add_argument("--investment", type=float, default=0.0, help="Investment, for cost per score point")
    score_parser.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    # weights command
    weights_parser = subparsers.add_parser("weights", help="Show a category's weight tiers")
    weights_parser.add_argument("--category", required=True, help="Proposal category")

    # check command
    subparsers.add_parser("check", help="Validate catalog and weight tables")

    args = parser.parse_args(argv)

    configure_logging(args.log_level or get_log_level())
    logger = EngineLogger(log_level=args.log_level or get_log_level(), log_file=args.log_file)

    commands = {"score": cmd_score, "weights": cmd_weights, "check": cmd_check}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        return 1

    try:
        code = command(args, logger)
    except ConfigurationError as e:
        logger.error("Configuration error", exception=e)
        console.print(f"[red]Configuration error: {e}[/red]")
        code = 1

    summary = logger.summary()
    logger.debug("Run finished", command=args.command, errors=summary["errors"], warnings=summary["warnings"])
    return code


if __name__ == "__main__":
    sys.exit(main())

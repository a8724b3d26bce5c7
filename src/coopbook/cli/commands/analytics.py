"""Classification analytics command."""

import json

import click
from coopbook.cli.error_handling import handle_domain_error
from coopbook.domain.analytics import AnalyticsService, TIME_RANGE_DAYS
from coopbook.domain.entities import ClassificationAnalytics


def print_analytics(metrics: ClassificationAnalytics) -> None:
    click.echo(f"\nClassification analytics {metrics.start_date} to {metrics.end_date}")
    click.echo("=" * 60)
    click.echo(f"Classifications:     {metrics.total_classifications}")
    click.echo(f"Accurate:            {metrics.accurate_classifications} ({metrics.accuracy_rate:.2f}%)")
    click.echo(f"Manual overrides:    {metrics.manual_overrides} ({metrics.override_rate:.2f}%)")
    click.echo(f"Average confidence:  {metrics.avg_confidence_score:.2f}")

    for alert in metrics.alerts:
        click.echo(f"ALERT: {alert}")

    if metrics.category_accuracy:
        click.echo("\nBy category:")
        for row in metrics.category_accuracy:
            click.echo(
                f"  {row.category_name:<30} {row.accurate_suggestions:>4}/{row.total_suggestions:<4} "
                f"{row.accuracy_rate:6.2f}%"
            )

    if metrics.top_patterns:
        click.echo("\nTop patterns:")
        for row in metrics.top_patterns:
            click.echo(
                f"  {row.pattern_name:<30} used {row.usage_count:>4}  accurate {row.accuracy_rate:6.2f}%"
            )

    click.echo("\nConfidence distribution:")
    for bucket in metrics.confidence_distribution:
        click.echo(f"  {bucket.label:<8} {bucket.count:>5}  accurate {bucket.accuracy_rate:6.2f}%")


@click.command("analytics")
@click.option(
    "--range",
    "time_range",
    default="30d",
    show_default=True,
    help=f"Time window ({', '.join(TIME_RANGE_DAYS)})",
)
@click.option("--json", "as_json", is_flag=True, help="Print the metrics as JSON")
@click.pass_context
def show_analytics(ctx, time_range: str, as_json: bool):
    """Show how well category suggestions are doing."""
    service = AnalyticsService(ctx.obj["db"])
    try:
        metrics = service.get_classification_analytics(time_range)
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    if as_json:
        click.echo(json.dumps(metrics.as_dict(), indent=2))
        return
    print_analytics(metrics)


def register_commands(cli):
    """Register analytics command with main CLI."""
    cli.add_command(show_analytics)

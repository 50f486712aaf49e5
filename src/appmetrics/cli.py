"""Command-line interface for appmetrics."""

import json
import logging
import sys
from pathlib import Path

import click
import yaml

from appmetrics.filter import CustomMetricFilter
from appmetrics.orchestration import MetricsApplicationContext
from appmetrics.reporting import UnitConverter, registry_snapshot, registry_to_dataframe
from appmetrics.utils.config_validator import ConfigurationError, validate_and_load_config

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

EXAMPLE_CONFIG = {
    "metrics": {
        "registry_name": "",
        "runtime_prefix": "python",
        "report": {
            "jmx": True,
            "domain": "metrics",
            "rate_unit": "seconds",
            "duration_unit": "milliseconds",
        },
        "filter": {
            "include": [],
            "exclude": ["python.gc"],
        },
    },
}


@click.group()
@click.version_option(version="0.1.0", prog_name="appmetrics")
def cli():
    """appmetrics: runtime metrics, health checks and a filtered management reporter."""
    pass


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["table", "json", "csv"]), default="table",
    help="Snapshot output format"
)
@click.option(
    "--all", "-a", "show_all", is_flag=True,
    help="Show every registered metric, not only those the filter exports"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    help="Logging level"
)
def run(config_file: str, output_format: str, show_all: bool, log_level: str):
    """Start the metrics wiring from a configuration file and print a snapshot."""
    logging.getLogger().setLevel(getattr(logging, log_level))

    click.echo(f"Loading configuration from {config_file}...", err=True)

    try:
        context = MetricsApplicationContext.from_file(config_file)
        context.refresh()
    except ConfigurationError as e:
        click.echo(click.style(f"✗ Invalid configuration: {e}", fg="red"), err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        registry = context.get_bean("registry")
        reporter_properties = context.get_bean("reporter_properties")
        converter = UnitConverter(reporter_properties.rate_unit, reporter_properties.duration_unit)
        metric_filter = CustomMetricFilter(context.get_bean("metric_filter_properties"))
        selected = (lambda name, metric: True) if show_all else metric_filter

        if output_format == "json":
            rows = registry_snapshot(registry, selected, converter)
            click.echo(json.dumps(rows, indent=2, default=str))
        else:
            frame = registry_to_dataframe(registry, selected, converter)
            if output_format == "csv":
                click.echo(frame.to_csv(), nl=False)
            else:
                click.echo(frame.to_string())

        if context.contains_bean("register_jmx_reporter"):
            reporter = context.get_bean("register_jmx_reporter")
            click.echo(
                f"\nJMX reporter published {len(reporter.object_names())} beans "
                f"in domain '{reporter.domain}'",
                err=True,
            )
        else:
            click.echo("\nJMX reporter disabled (metrics.report.jmx=false)", err=True)
    finally:
        context.close()


@cli.command()
@click.option(
    "--output", "-o", default="metrics.yaml",
    help="Output file path"
)
@click.option(
    "--format", "-f", "output_format", type=click.Choice(["yaml", "json"]), default="yaml",
    help="Configuration file format"
)
def generate_config(output: str, output_format: str):
    """Generate an example configuration file."""
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        if output_format == "yaml":
            yaml.dump(EXAMPLE_CONFIG, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(EXAMPLE_CONFIG, f, indent=2)

    click.echo(f"Generated example configuration at {output_path}")


@cli.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate(config_file: str):
    """Validate a configuration file without starting anything."""
    click.echo(f"Validating configuration: {config_file}")

    try:
        is_valid, errors, _config = validate_and_load_config(config_file)
    except Exception as e:
        click.echo(click.style(f"Error validating configuration: {e}", fg="red"))
        sys.exit(1)

    if is_valid:
        click.echo(click.style("✓ Configuration is valid", fg="green"))
    else:
        click.echo(click.style(f"✗ Configuration has {len(errors)} errors:", fg="red"))
        for i, error in enumerate(errors[:20], 1):
            click.echo(f"  {i}. {error}")
        if len(errors) > 20:
            click.echo(f"  ... and {len(errors) - 20} more errors")

    sys.exit(0 if is_valid else 1)


if __name__ == "__main__":
    cli()

"""Analyze command - run the diff and risk analysis on a Terraform plan."""

import logging
import sys
from pathlib import Path
import click
from ...utils.errors import PlanDiffError
from ...utils.logging import get_logger, set_level
from ..utils import run_analysis, format_error, format_json_output

logger = get_logger("cli.analyze")


@click.command()
@click.argument('plan_json', type=click.Path(exists=False))
@click.option('--config', 'config_path', type=click.Path(), help='Config file layered over the defaults')
@click.option('--output', '-o', type=click.Path(), help='Save output to file')
@click.option('--quiet', is_flag=True, help='Suppress progress messages')
def analyze(plan_json, config_path, output, quiet):
    """
    Analyze a Terraform plan and emit the change analysis as JSON.

    PLAN_JSON is the output of: terraform show -json plan.tfplan > plan.json
    """
    if quiet:
        set_level(logging.WARNING)

    try:
        if not quiet:
            click.echo(f"Analyzing plan: {plan_json}", err=True)

        result = run_analysis(plan_json, config_path=config_path)
        output_text = format_json_output(result)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(output_text)
            logger.debug(f"Wrote {len(output_text)} characters to {output_path}")
            if not quiet:
                click.echo(f"Output saved to: {output_path}", err=True)
        else:
            click.echo(output_text)

        if not quiet:
            stats = result.statistics
            click.echo(
                f"{stats.added} to add, {stats.modified} to change, {stats.removed} to destroy, "
                f"{stats.replacements} to replace ({stats.high_risk} dangerous)",
                err=True,
            )

    except PlanDiffError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except OSError as e:
        click.echo(format_error(f"Could not write output: {e}"), err=True)
        sys.exit(1)

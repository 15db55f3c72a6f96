"""
Command Line Interface for deplan.
"""
import logging

import click
from dotenv import load_dotenv

from ..errors import DeplanError
from ..PARSERS.manifest_parser import ManifestParser
from ..PARSERS.artifact_parser import DeploymentOrderParser, LocalConfigParser, UnionParser
from ..RUNNERS.topological_sorter import build_deployment_order
from ..RUNNERS.union_find import group_all
from ..RUNNERS.cluster_bucketizer import bucketize
from ..RUNNERS.subset_resolver import SubsetResolver
from ..CONVERTERS.artifact_writer import (
    clusters_to_data,
    order_to_data,
    plan_to_data,
    write_artifact,
)
from ..CONVERTERS import report

ENV_PREFIX = "DEPLAN"

INPUT_FILE = click.Path(exists=True, dir_okay=False)


class ClickEchoHandler(logging.Handler):
    """
    Sends log records to stderr through click so they follow click's stream handling.
    """
    def emit(self, record):
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def configure_logging(verbose: bool = False):
    """
    Attaches a single console handler to the ``deplan`` logger.

    :param verbose: Log debug messages as well.
    """
    logger = logging.getLogger("deplan")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, ClickEchoHandler) for h in logger.handlers):
        handler = ClickEchoHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        logger.addHandler(handler)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    deplan - Deployment planner for interdependent services.

    Computes a dependencies-first deployment order, groups services into
    independently deployable clusters and resolves local deployment plans.
    """
    ctx.ensure_object(dict)
    configure_logging(verbose)


@cli.command()
@click.option('--input', '-i', 'input_file', type=INPUT_FILE, default='dependency-manifest.yml',
              show_default=True, help='Dependency manifest')
@click.option('--output', '-o', 'output_file', default='deployment-order.yml',
              show_default=True, help='Deployment order artifact to write')
@click.option('--quiet', '-q', is_flag=True, help='Do not print the order')
def order(input_file, output_file, quiet):
    """Compute the deployment order for every service in the manifest."""
    try:
        graph = ManifestParser().parse_graph(input_file)
        deployment_order = build_deployment_order(graph)
    except DeplanError as e:
        raise click.ClickException(str(e))

    if not quiet:
        click.echo(report.render_order(deployment_order), nl=False)
    write_artifact(order_to_data(deployment_order), output_file)
    click.echo(f"Deployment order saved to {output_file}")


@cli.command()
@click.option('--input', '-i', 'input_file', type=INPUT_FILE, default='dependency-manifest.yml',
              show_default=True, help='Dependency manifest')
@click.option('--output', '-o', 'output_file', default=None, help='Union mapping to write')
def group(input_file, output_file):
    """Group services into connected components."""
    try:
        graph = ManifestParser().parse_graph(input_file)
    except DeplanError as e:
        raise click.ClickException(str(e))

    groups = group_all(graph)
    if output_file:
        write_artifact(groups, output_file)
        click.echo(f"Union mapping saved to {output_file}")
    else:
        click.echo(report.render_groups(groups), nl=False)


@cli.command()
@click.option('--union', '-u', 'union_file', type=INPUT_FILE, default='union.yml',
              show_default=True, help='Union mapping produced by "group"')
@click.option('--order', '-d', 'order_file', type=INPUT_FILE, default='deployment-order.yml',
              show_default=True, help='Deployment order produced by "order"')
@click.option('--output', '-o', 'output_file', default=None, help='Per-cluster orders to write')
def clusters(union_file, order_file, output_file):
    """Split the deployment order into independently deployable clusters."""
    try:
        equivalence = UnionParser.parse(union_file)
        deployment_order = DeploymentOrderParser.parse(order_file)
        buckets = bucketize(deployment_order, equivalence)
    except DeplanError as e:
        raise click.ClickException(str(e))

    click.echo(report.render_clusters(buckets), nl=False)
    if output_file:
        write_artifact(clusters_to_data(buckets), output_file)
        click.echo(f"Cluster orders saved to {output_file}")


@cli.command()
@click.option('--order', '-d', 'order_file', type=INPUT_FILE, default='deployment-order.yml',
              show_default=True, help='Deployment order produced by "order"')
@click.option('--config', '-c', 'config_file', type=INPUT_FILE, default='local-config.json',
              show_default=True, help='Local override config')
@click.option('--output', '-o', 'output_file', default='local-deployment-plan.json',
              show_default=True, help='Deployment plan to write')
@click.option('--strict', is_flag=True, help='Fail when a planned service depends on a skipped one')
def plan(order_file, config_file, output_file, strict):
    """Resolve the local deployment plan for one service."""
    try:
        deployment_order = DeploymentOrderParser.parse(order_file)
        local_config = LocalConfigParser.parse(config_file)
        deployment_plan = SubsetResolver(strict=strict).resolve_config(deployment_order, local_config)
    except DeplanError as e:
        raise click.ClickException(str(e))

    click.echo(report.render_plan(deployment_plan), nl=False)
    write_artifact(plan_to_data(deployment_plan), output_file)
    click.echo(f"Deployment plan saved to {output_file}")


def main():
    """
    Main entry point for the CLI.
    """
    load_dotenv()
    cli(obj={}, auto_envvar_prefix=ENV_PREFIX)


if __name__ == '__main__':
    main()

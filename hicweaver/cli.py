#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for HiCWeaver.

This module provides the main CLI entry point and all subcommands for
Hi-C guided contig ordering (sort), misassembly detection (cut), and
contact decay analysis (decay).
"""

import logging
import sys
import click
from pathlib import Path
import yaml

from .version import __version__
from .config.parser import ConfigParser
from .config.schema import TEMPLATES, load_config, save_config_template, validate_config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _setup_logging(config, verbose=False, quiet=False):
    """Configure root logging from the output.logging config section."""
    log_cfg = config.get_output_config().get('logging', {}) or {}
    level_name = str(log_cfg.get('level') or 'INFO').upper()
    if verbose:
        level_name = 'DEBUG'
    elif quiet:
        level_name = 'WARNING'

    handlers = [logging.StreamHandler()]
    if log_cfg.get('log_file'):
        handlers.append(logging.FileHandler(log_cfg['log_file']))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def _load_run_config(ctx, config_file, overrides):
    """Load config, apply CLI overrides, validate, and set up logging."""
    config = ConfigParser(config_file)
    config.merge_cli_overrides(overrides)
    config.validate()
    _setup_logging(config, ctx.obj.get('VERBOSE'), ctx.obj.get('QUIET'))
    return config


def _fail(message):
    click.echo(f"✗ Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Suppress non-error output')
@click.pass_context
def main(ctx, verbose, quiet):
    """
    HiCWeaver: Hi-C guided contig curation

    Orders and orients contigs into chains and flags chimeric joins,
    using only the contact signal in a Hi-C map.
    """
    # Ensure context object exists
    ctx.ensure_object(dict)
    ctx.obj['VERBOSE'] = verbose
    ctx.obj['QUIET'] = quiet


# ============================================================================
# Curation Commands
# ============================================================================

@main.command()
@click.argument('matrix', type=click.Path(exists=True))
@click.argument('contigs', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--max-diagonal-distance', type=int, default=None,
              help='Sampling window for profile and link scoring (pixels)')
@click.option('--signal-cutoff', type=float, default=None,
              help='Minimum link score kept as a candidate')
@click.option('--hard-threshold', type=float, default=None,
              help='Minimum link score accepted for merging')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Output chains file (TSV)')
@click.pass_context
def sort(ctx, matrix, contigs, config_file, max_diagonal_distance, signal_cutoff,
         hard_threshold, output):
    """
    Order and orient contigs into chains.

    MATRIX is a square contact matrix (.npy, .npz or text) and CONTIGS a TSV
    table with name, pixel_start, pixel_end and an optional order column.
    """
    from .curation_core import merge_chains, sort_contigs
    from .io_utils import chains_to_order, load_contact_matrix, load_contig_table, write_chains

    try:
        config = _load_run_config(ctx, config_file, {
            'sort.max_diagonal_distance': max_diagonal_distance,
            'sort.signal_cutoff': signal_cutoff,
            'sort.hard_threshold': hard_threshold,
        })
        sort_cfg = config.get_sort_config()

        contact_map = load_contact_matrix(matrix)
        table = load_contig_table(contigs)

        result = sort_contigs(
            contact_map, contact_map.shape[0], table.contigs, table.order,
            table.full_resolution_size, params=sort_cfg,
        )
        chains = result.chains
        if sort_cfg.get('merge_threshold') is not None:
            chains = merge_chains(
                chains, result.links,
                merge_threshold=sort_cfg['merge_threshold'],
                base_threshold=result.threshold,
            )

        names = table.names
        multi = sum(1 for chain in chains if len(chain) > 1)
        click.echo(f"✓ {len(chains)} chains ({multi} with more than one contig) "
                   f"from {len(table)} contigs")

        click.echo("\nNew order:")
        for contig_id, inverted in chains_to_order(chains, table.order):
            click.echo(f"  {names[contig_id]}{' (inverted)' if inverted else ''}")

        if output:
            write_chains(chains, table.order, names, output)
            click.echo(f"\n✓ Chains written to: {output}")
    except Exception as e:
        _fail(e)


@main.command()
@click.argument('matrix', type=click.Path(exists=True))
@click.argument('contigs', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--cut-threshold', type=float, default=None,
              help='Relative drop below the local baseline marking a low region')
@click.option('--window-size', type=int, default=None,
              help='Largest diagonal distance sampled around an offset (pixels)')
@click.option('--min-fragment-size', type=int, default=None,
              help='Smallest fragment a cut may leave (pixels)')
@click.option('--output', '-o', type=click.Path(), default=None,
              help='Output breakpoints file (TSV)')
@click.pass_context
def cut(ctx, matrix, contigs, config_file, cut_threshold, window_size,
        min_fragment_size, output):
    """
    Detect chimeric joins inside contigs.

    Breakpoint offsets are reported in each contig's full-resolution pixels.
    """
    from .curation_core import cut_contigs
    from .io_utils import load_contact_matrix, load_contig_table, write_breakpoints

    try:
        config = _load_run_config(ctx, config_file, {
            'cut.cut_threshold': cut_threshold,
            'cut.window_size': window_size,
            'cut.min_fragment_size': min_fragment_size,
        })

        contact_map = load_contact_matrix(matrix)
        table = load_contig_table(contigs)

        result = cut_contigs(
            contact_map, contact_map.shape[0], table.contigs, table.order,
            table.full_resolution_size, params=config.get_cut_config(),
        )

        names = table.names
        click.echo(f"✓ {result.total_breakpoints} breakpoints in "
                   f"{len(result.breakpoints)} contigs")
        for order_index in sorted(result.breakpoints):
            name = names[table.order[order_index]]
            for bp in result.breakpoints[order_index]:
                click.echo(f"  {name}: offset {bp.offset} (confidence {bp.confidence:.2f})")

        if output:
            write_breakpoints(result, table.order, names, output)
            click.echo(f"\n✓ Breakpoints written to: {output}")
    except Exception as e:
        _fail(e)


@main.command()
@click.argument('matrix', type=click.Path(exists=True))
@click.argument('contigs', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True),
              help='Configuration file (YAML)')
@click.option('--max-distance', type=int, default=None,
              help='Largest diagonal distance (default: min(size/2, 500))')
@click.pass_context
def decay(ctx, matrix, contigs, config_file, max_distance):
    """Fit the contact decay exponent P(s) of a Hi-C map."""
    from .analysis_utils import compute_contact_decay
    from .curation_core import build_contig_ranges
    from .io_utils import load_contact_matrix, load_contig_table

    try:
        config = _load_run_config(ctx, config_file, {'decay.max_distance': max_distance})

        contact_map = load_contact_matrix(matrix)
        table = load_contig_table(contigs)
        size = contact_map.shape[0]
        ranges = build_contig_ranges(
            table.contigs, table.order, size, table.full_resolution_size
        )

        result = compute_contact_decay(
            contact_map, size, ranges,
            max_distance=config.get('decay.max_distance'),
        )
        click.echo(f"P(s) exponent: {result.decay_exponent:.3f}")
        click.echo(f"P(s) R²: {result.r_squared:.3f}")
        click.echo(f"P(s) range: 1-{result.max_distance} px "
                   f"({len(result.distances)} distances with signal)")
        if not result.in_typical_range:
            click.echo("⚠ Exponent outside the typical Hi-C range [-1.5, -0.8]")
    except Exception as e:
        _fail(e)


# ============================================================================
# Configuration Management Commands
# ============================================================================

@main.group()
def config():
    """Configuration management commands."""
    pass


@config.command('init')
@click.option('--output', '-o', type=click.Path(), default='hicweaver_config.yaml',
              help='Output configuration file path')
@click.option('--template', '-t', type=click.Choice(list(TEMPLATES)),
              default='default', help='Configuration template type')
def config_init(output, template):
    """Generate a template configuration file with all available parameters."""
    click.echo(f"Generating {template} configuration template: {output}")

    try:
        save_config_template(Path(output), template=template)
        click.echo(f"✓ Configuration file created: {output}")
        click.echo("\nThe configuration file includes:")
        click.echo("  • Sort (chain assembly) thresholds")
        click.echo("  • Cut (breakpoint detection) windows and thresholds")
        click.echo("  • Contact decay and logging settings")
    except Exception as e:
        _fail(f"creating configuration: {e}")


@config.command('validate')
@click.argument('config_file', type=click.Path(exists=True))
def config_validate(config_file):
    """Validate a configuration file."""
    click.echo(f"Validating configuration file: {config_file}")

    try:
        config = load_config(Path(config_file))
    except yaml.YAMLError as e:
        _fail(f"validating configuration: {e}")

    errors = validate_config(config)
    if errors:
        click.echo("\n✗ Configuration validation failed:")
        for error in errors:
            click.echo(f"  • {error}", err=True)
        sys.exit(1)

    click.echo("✓ Configuration is valid")
    click.echo("\nKey Settings:")
    click.echo(f"  Sort hard threshold: {config['sort']['hard_threshold']}")
    click.echo(f"  Cut threshold: {config['cut']['cut_threshold']}")
    click.echo(f"  Cut window: {config['cut']['window_size']} px")


@config.command('show')
@click.argument('config_file', type=click.Path(exists=True))
@click.option('--format', '-f', type=click.Choice(['yaml', 'summary']), default='summary',
              help='Output format')
def config_show(config_file, format):
    """Display configuration settings."""
    try:
        config = load_config(Path(config_file))
    except yaml.YAMLError as e:
        _fail(f"reading configuration: {e}")

    if format == 'yaml':
        click.echo(yaml.dump(config, default_flow_style=False, sort_keys=False))
        return

    click.echo(f"Configuration from: {config_file}")
    click.echo("=" * 60)

    click.echo("\nSort:")
    for key, value in config['sort'].items():
        click.echo(f"  {key}: {value}")

    click.echo("\nCut:")
    for key, value in config['cut'].items():
        click.echo(f"  {key}: {value}")

    click.echo("\nLogging:")
    log_cfg = config['output']['logging']
    click.echo(f"  Level: {log_cfg['level']}")
    click.echo(f"  Log file: {log_cfg['log_file'] or '(none)'}")


# ============================================================================
# Utility Commands
# ============================================================================

@main.command()
def version():
    """Show version information."""
    click.echo(f"HiCWeaver v{__version__}")
    click.echo("\nDependencies:")

    import numpy
    import scipy
    click.echo(f"  NumPy: {numpy.__version__}")
    click.echo(f"  SciPy: {scipy.__version__}")
    click.echo(f"  PyYAML: {yaml.__version__}")


if __name__ == '__main__':
    sys.exit(main())

from __future__ import annotations
import click
import json
import os
from .config import load_config, AppConfig
from .codec.encoder import ObjectEncoder
from .codec.selector import FormatSelector
from .codec.serializers import JSON_MEDIA_TYPE, YAML_MEDIA_TYPE
from .errors import KubegenError
from .export.partition import ArtifactPartitioner, FILENAME_RULES, FILE_EXTENSIONS
from .kube.scheme import build_scheme
from .source.manifests import load_file
from .util import logging as log

FORMAT_ALIASES = {'yaml': YAML_MEDIA_TYPE, 'json': JSON_MEDIA_TYPE}


def _load_app_config(ctx) -> AppConfig:
    try:
        cfg = load_config(ctx.obj['config'])
        log.configure_logging(cfg.logging.level, cfg.logging.format)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    return cfg


def _make_selector(cfg: AppConfig) -> FormatSelector:
    try:
        return FormatSelector(build_scheme(), cfg.versions)
    except ValueError as e:
        raise click.ClickException(str(e))


@click.group(add_help_option=False)
@click.option('--config', default=None, help='Config file path (defaults apply when omitted)')
@click.pass_context
def cli(ctx, config):
    """Kubernetes manifest generator CLI"""
    ctx.ensure_object(dict)
    ctx.obj['config'] = config


@cli.command(add_help_option=False)
@click.option('-f', '--file', 'files', multiple=True, required=True,
              type=click.Path(exists=True, dir_okay=False), help='Source manifest(s); repeat for multiple')
@click.option('--format', 'output_format', default=None, help='Output format: yaml, json or a media type')
@click.option('--pretty/--no-pretty', default=None, help='Pretty-print where the format supports it')
@click.option('--split', is_flag=True, help='Write one file per object instead of a single List')
@click.option('--out', required=False, help='Output directory with --split, output file otherwise')
@click.option('--strict', is_flag=True, help='With --split, fail on objects that cannot be named')
@click.pass_context
def render(ctx, files, output_format, pretty, split, out, strict):
    """Encode source manifests into normalized output."""
    cfg = _load_app_config(ctx)
    content_type = FORMAT_ALIASES.get(output_format, output_format) if output_format else cfg.output.content_type
    if pretty is None:
        pretty = cfg.output.pretty
    selector = _make_selector(cfg)
    encoder = ObjectEncoder(selector)
    try:
        objects = []
        for path in files:
            loaded = load_file(path, selector)
            log.info('loaded source', path=path, objects=len(loaded))
            objects.extend(loaded)
        if not objects:
            raise click.ClickException('No objects found in the given files')
        if split:
            partitioner = ArtifactPartitioner(encoder, legacy_json_extension=cfg.output.legacy_json_extension)
            out_dir = out or cfg.output.dir
            result = partitioner.partition(objects, content_type, strict=strict)
            written = partitioner.write(result.artifacts, out_dir, cfg.output.file_mode)
            for rejected in result.rejected:
                click.echo(f'skipped: {rejected}', err=True)
            click.echo(json.dumps({
                'written': [os.path.join(out_dir, name) for name in written],
                'skipped': len(result.rejected),
            }, indent=2))
            return
        if len(objects) == 1:
            data = encoder.encode(objects[0], content_type, pretty)
        else:
            data = encoder.encode_list(objects, content_type, pretty)
    except KubegenError as e:
        raise click.ClickException(str(e))
    if out:
        try:
            with open(out, 'wb') as f:
                f.write(data)
        except OSError as e:
            raise click.ClickException(f'kubegen/export: error writing to file {out!r}: {e}')
        click.echo(f'Wrote {len(objects)} object(s) to {out}')
    else:
        click.echo(data.decode('utf-8'), nl=False)


@cli.command(add_help_option=False)
@click.pass_context
def kinds(ctx):
    """List kinds that can be split into files."""
    cfg = _load_app_config(ctx)
    selector = _make_selector(cfg)
    click.echo('Splittable kinds:')
    for kind, rule in FILENAME_RULES.items():
        version = next((gv for gv in selector.versions if selector.scheme.recognizes(gv, kind)), '-')
        click.echo(f'  {kind:14} {version:12} <name>-{rule.suffix}.<ext>')


@cli.command(add_help_option=False)
@click.pass_context
def formats(ctx):
    """List supported output formats."""
    cfg = _load_app_config(ctx)
    selector = _make_selector(cfg)
    click.echo('Supported formats:')
    for info in selector.supported_media_types():
        pretty = 'pretty' if info.pretty_serializer is not None else 'compact only'
        ext = FILE_EXTENSIONS.get(info.media_type, '-')
        click.echo(f'  {info.media_type:18} .{ext:6} ({pretty})')


@cli.command('help', add_help_option=False)
@click.argument('command', required=False)
@click.pass_context
def help_cmd(ctx, command):
    """Show context-driven help for a command, or list all commands."""
    group = ctx.parent.command if ctx.parent else ctx.command
    if not command:
        click.echo("Available commands:")
        for cmd_name in group.commands:
            click.echo(f"  {cmd_name}")
        click.echo("\nRun 'kubegen help <command>' for details.")
        return
    cmd = group.commands.get(command)
    if not cmd:
        click.echo(f"Unknown command: {command}")
        click.echo("Run 'kubegen help' to list available commands.")
        return
    with click.Context(cmd) as cmd_ctx:
        click.echo(cmd.get_help(cmd_ctx))


if __name__ == '__main__':
    cli()

"""CLI entry point for hushnote."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from hushnote import __version__
from hushnote.l1_entities.transcript import format_duration
from hushnote.l1_entities.transcription_record import RecordSource, TranscriptionRecord


def _status(record: TranscriptionRecord) -> str:
    if record.is_transcribing:
        return 'transcribing'
    if record.text is None:
        return 'failed'
    return 'summarized' if record.summary else 'done'


def _format_row(record: TranscriptionRecord) -> str:
    created = record.created_at.astimezone().strftime('%Y-%m-%d %H:%M')
    return f'{record.id[:8]}  {created}  {format_duration(record.duration)}  {_status(record):<12}  {record.display_title}'


def _echo_records(records: list[TranscriptionRecord]) -> None:
    if not records:
        click.echo('No transcriptions.')
        return
    for record in records:
        click.echo(_format_row(record))


def _fail(message: str) -> None:
    click.echo(f'Error: {message}', err=True)
    sys.exit(1)


def _container(ctx: click.Context):
    """Build the dependency container once per invocation (deferred: not needed for --help)."""
    if 'container' in ctx.obj:
        return ctx.obj['container']

    from pydantic import ValidationError  # noqa: PLC0415 -- deferred: not needed for --help

    from hushnote.l1_entities.errors import PersistenceError  # noqa: PLC0415 -- deferred: not needed for --help
    from hushnote.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: yaml stack not loaded on --help
        YamlConfigLoader,
    )
    from hushnote.l4_frameworks_and_drivers.container import (  # noqa: PLC0415 -- deferred: model stack not loaded on --help
        DependencyContainer,
    )
    from hushnote.l4_frameworks_and_drivers.infra_config import (  # noqa: PLC0415 -- deferred: not needed for --help
        InfraConfig,
        build_app_config,
    )
    from hushnote.l4_frameworks_and_drivers.logging_setup import (  # noqa: PLC0415 -- deferred: not needed for --help
        setup_file_logging,
    )

    overrides: dict = {}
    if ctx.obj.get('data_dir'):
        overrides['storage'] = {'directory': ctx.obj['data_dir']}
    try:
        raw = YamlConfigLoader().load_raw(ctx.obj.get('config_path'), overrides=overrides or None)
        config = build_app_config(raw)
        infra = InfraConfig.model_validate(raw)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        _fail(str(e))

    try:
        setup_file_logging(Path(config.storage.directory).expanduser())
        container = DependencyContainer(config, infra=infra)
        recovered = container.controller.startup()
    except (PersistenceError, OSError) as e:
        _fail(f'Cannot open the transcription library: {e}')
    if recovered:
        click.echo(f'Note: {recovered} interrupted transcription(s) can be retried.', err=True)

    ctx.obj['container'] = container
    ctx.call_on_close(container.engine.unload)
    return container


def _run(coro):
    return asyncio.run(coro)


def _report(result, success: str) -> None:
    if not result.ok:
        _fail(result.message)
    click.echo(success)


@click.group()
@click.option(
    '-c',
    '--config',
    'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to YAML config file.',
)
@click.option(
    '-d',
    '--data-dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory holding the library database and imported audio.',
)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, config_path, data_dir):
    """hushnote -- transcribe and summarize audio with local models."""
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config_path
    ctx.obj['data_dir'] = data_dir


@cli.command('import')
@click.argument('audio_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('-t', '--title', default=None, help='Title for the transcription (defaults to the file name).')
@click.option('--recording', is_flag=True, help='Mark the file as a voice recording rather than an imported file.')
@click.option('-s', '--summarize', 'also_summarize', is_flag=True, help='Generate a summary after transcribing.')
@click.pass_context
def import_cmd(ctx, audio_file, title, recording, also_summarize):
    """Import AUDIO_FILE and transcribe it."""
    controller = _container(ctx).controller
    source = RecordSource.RECORDING if recording else RecordSource.FILE
    click.echo(f'Transcribing {audio_file.name} with {controller.engine.model_name}...', err=True)

    result = _run(controller.import_file(audio_file, title=title, source=source))
    if not result.ok:
        if result.record is not None:
            click.echo(f'Saved as {result.record.id[:8]}; retry with: hushnote retry {result.record.id[:8]}', err=True)
        _fail(result.message)

    record = result.record
    click.echo(_format_row(record))
    if also_summarize:
        summary = _run(controller.summarize(record.id))
        if not summary.ok:
            _fail(summary.message)
        click.echo(f'\n{summary.record.summary}')


@cli.command('list')
@click.pass_context
def list_cmd(ctx):
    """List transcriptions, newest first."""
    _echo_records(_container(ctx).controller.records())


@cli.command()
@click.argument('query')
@click.pass_context
def search(ctx, query):
    """Find transcriptions whose title or text contains QUERY."""
    _echo_records(_container(ctx).controller.search(query))


@cli.command()
@click.argument('record_id')
@click.pass_context
def show(ctx, record_id):
    """Show a transcription's details, transcript and summary."""
    record = _container(ctx).controller.find(record_id)
    if record is None:
        _fail(f'No transcription with id {record_id!r}.')
    click.echo(f'Title:     {record.display_title}')
    click.echo(f'Id:        {record.id}')
    click.echo(f'File:      {record.original_filename or "-"} ({record.source.value})')
    click.echo(f'Created:   {record.created_at.astimezone():%Y-%m-%d %H:%M:%S}')
    click.echo(f'Duration:  {format_duration(record.duration)}')
    click.echo(f'Language:  {record.language or "-"}')
    click.echo(f'Status:    {_status(record)}')
    if record.summary:
        click.echo(f'\nSummary\n-------\n{record.summary}')
    if record.text:
        click.echo(f'\nTranscript\n----------\n{record.text}')


@cli.command()
@click.argument('record_id')
@click.pass_context
def retry(ctx, record_id):
    """Transcribe RECORD_ID again."""
    result = _run(_container(ctx).controller.retry(record_id))
    _report(result, _format_row(result.record) if result.record else '')


@cli.command()
@click.argument('record_id')
@click.pass_context
def summarize(ctx, record_id):
    """Generate a summary for RECORD_ID."""
    result = _run(_container(ctx).controller.summarize(record_id))
    _report(result, result.record.summary if result.record else '')


@cli.command()
@click.argument('record_id')
@click.argument('title')
@click.pass_context
def rename(ctx, record_id, title):
    """Change the title of RECORD_ID."""
    result = _container(ctx).controller.rename(record_id, title)
    _report(result, f'Renamed to {result.record.display_title}' if result.record else '')


@cli.command()
@click.argument('record_id')
@click.option('-y', '--yes', is_flag=True, help='Do not ask for confirmation.')
@click.pass_context
def delete(ctx, record_id, yes):
    """Delete RECORD_ID and its audio file."""
    controller = _container(ctx).controller
    record = controller.find(record_id)
    if record is None:
        _fail(f'No transcription with id {record_id!r}.')
    if not yes:
        click.confirm(f'Delete "{record.display_title}" and its audio?', abort=True)
    _report(controller.delete(record.id), f'Deleted {record.display_title}')


@cli.command()
@click.option(
    '--select',
    'selected',
    default=None,
    metavar='NAME',
    help='Make NAME the default model (saved to the config file).',
)
@click.pass_context
def models(ctx, selected):
    """List known whisper models; the configured one is marked with *."""
    from hushnote.l3_interface_adapters.gateways.hf_model_resolver import (  # noqa: PLC0415 -- deferred: not needed for other commands
        HfModelResolver,
    )
    from hushnote.l3_interface_adapters.gateways.yaml_config_loader import (  # noqa: PLC0415 -- deferred: not needed for other commands
        YamlConfigLoader,
    )

    container = _container(ctx)
    if selected is not None:
        if selected not in HfModelResolver.available_models():
            _fail(f'Unknown whisper model {selected!r}. Run "hushnote models" to list them.')
        try:
            saved = YamlConfigLoader().save_overrides(
                {'transcription': {'model': selected}},
                ctx.obj.get('config_path'),
            )
        except (OSError, ValueError) as e:
            _fail(f'Could not save the config file: {e}')
        container.controller.switch_model(selected)
        click.echo(f'Default model set to {selected} (saved to {saved})', err=True)

    current = container.engine.model_name
    for name in HfModelResolver.available_models():
        marker = '*' if name == current else ' '
        click.echo(f'{marker} {name}')

"""CLI entrypoint for diffstep."""

from __future__ import annotations

import json
from pathlib import Path

import click
from pydantic import ValidationError

from diffstep.app import DiffStepApp
from diffstep.config.store import SettingsStore, parse_setting_value
from diffstep.core.diff import DiffConfig, DiffEngine, DiffError
from diffstep.core.multi import MultiFileDiff
from diffstep.core.step import AnimationFrame
from diffstep.paths import settings_path
from diffstep.runtime_logging import configure_runtime_logging, read_events, resolve_log_file
from diffstep.ui.render import render_plain, render_summary
from diffstep.vcs.git import GitError
from diffstep.version import __version__


@click.group(invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--log-level", default=None, help="off, error, warning, info or debug")
@click.option("--log-file", default=None, type=click.Path(dir_okay=False), help="JSONL log destination")
@click.pass_context
def main(ctx: click.Context, log_level: str | None, log_file: str | None) -> None:
    """diffstep: step through a diff one change at a time."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    configure_runtime_logging(level=log_level, log_file=log_file)
    if ctx.invoked_subcommand is None:
        ctx.invoke(git_command)


def _engine(word_level: bool | None) -> DiffEngine:
    if word_level is None:
        settings = SettingsStore().load()
        return DiffEngine(settings.diff.to_config())
    return DiffEngine(DiffConfig(word_level=word_level))


def _diff_pair(old: str, new: str, word_level: bool | None) -> MultiFileDiff:
    try:
        return MultiFileDiff.from_paths([(old, new)], engine=_engine(word_level))
    except DiffError as exc:
        raise click.ClickException(str(exc))


def _run_app(ctx: click.Context, multi: MultiFileDiff) -> None:
    app = DiffStepApp(
        multi=multi,
        log_level=ctx.obj.get("log_level"),
        log_file=ctx.obj.get("log_file"),
    )
    app.run()


@main.command()
@click.argument("old", type=click.Path(dir_okay=False))
@click.argument("new", type=click.Path(dir_okay=False))
@click.option("--word-level/--no-word-level", default=None, help="Override the word-level setting")
@click.pass_context
def view(ctx: click.Context, old: str, new: str, word_level: bool | None) -> None:
    """Step through the diff between two files."""
    _run_app(ctx, _diff_pair(old, new, word_level))


@main.command("git")
@click.argument("path", required=False, default=".")
@click.option("--from", "from_ref", default=None, help="Base ref; with --to diffs a commit range")
@click.option("--to", "to_ref", default=None, help="Target ref (defaults to HEAD when --from is given)")
@click.option("--word-level/--no-word-level", default=None, help="Override the word-level setting")
@click.pass_context
def git_command(
    ctx: click.Context,
    path: str,
    from_ref: str | None,
    to_ref: str | None,
    word_level: bool | None,
) -> None:
    """Step through uncommitted changes or a ref range in a git repository."""
    repo = Path(path).expanduser().resolve()
    engine = _engine(word_level)
    try:
        if from_ref is not None:
            multi = MultiFileDiff.from_git_range(repo, from_ref, to_ref or "HEAD", engine=engine)
        else:
            multi = MultiFileDiff.from_git_uncommitted(repo, engine=engine)
    except GitError as exc:
        raise click.ClickException(str(exc))

    if multi.is_empty():
        raise click.ClickException("No changes to show")
    _run_app(ctx, multi)


@main.command()
@click.argument("old", type=click.Path(dir_okay=False))
@click.argument("new", type=click.Path(dir_okay=False))
@click.option("--step", "step", type=int, default=None, help="Position to show (default: final)")
@click.option("--hunks", is_flag=True, help="Count --step in hunks instead of changes")
@click.option("--word-level/--no-word-level", default=None, help="Override the word-level setting")
def show(old: str, new: str, step: int | None, hunks: bool, word_level: bool | None) -> None:
    """Print one step of the diff as plain text."""
    navigator = _diff_pair(old, new, word_level).files()[0].navigator

    navigator.set_hunk_preview_mode(hunks)
    if step is None:
        navigator.goto_end()
    else:
        for _ in range(step):
            if not navigator.step_forward():
                break

    click.echo(render_plain(navigator.current_view(AnimationFrame.idle())))


@main.command()
@click.argument("old", type=click.Path(dir_okay=False))
@click.argument("new", type=click.Path(dir_okay=False))
@click.option("--word-level/--no-word-level", default=None, help="Override the word-level setting")
@click.option("--text", "as_text", is_flag=True, help="Human-readable output instead of JSON")
def summary(old: str, new: str, word_level: bool | None, as_text: bool) -> None:
    """Report change counts between two files."""
    multi = _diff_pair(old, new, word_level)
    if as_text:
        click.echo(render_summary(multi))
        return

    entry = multi.files()[0]
    result = entry.file_diff.result
    payload = {
        "old_path": entry.file_diff.old_path,
        "new_path": entry.file_diff.new_path,
        "insertions": result.insertions,
        "deletions": result.deletions,
        "changes": len(result.significant_changes),
        "hunks": [
            {
                "id": hunk.id,
                "old_start": hunk.old_start,
                "new_start": hunk.new_start,
                "changes": len(hunk),
                "insertions": hunk.insertions,
                "deletions": hunk.deletions,
            }
            for hunk in result.hunks
        ],
    }
    click.echo(json.dumps(payload, indent=2))


@main.command()
@click.option("--limit", type=int, default=100, show_default=True)
@click.option("--event", "prefix", default=None, help="Only events whose name starts with this prefix")
@click.option("--file", "path", default=None, type=click.Path(dir_okay=False), help="Log file to read")
@click.pass_context
def logs(ctx: click.Context, limit: int, prefix: str | None, path: str | None) -> None:
    """Print recent runtime log events."""
    file_path = resolve_log_file(path or ctx.obj.get("log_file"))
    if not file_path.exists():
        raise click.ClickException(f"File not found: {file_path}")

    for event in read_events(file_path, limit=limit, prefix=prefix):
        click.echo(json.dumps(event, sort_keys=True))


@main.command("settings-path")
def settings_path_command() -> None:
    """Print settings file path."""
    click.echo(str(settings_path()))


@main.group("settings")
@click.option("--file", "path", default=None, type=click.Path(dir_okay=False), help="Settings file to use")
@click.pass_context
def settings_group(ctx: click.Context, path: str | None) -> None:
    """Show or change persisted settings."""
    ctx.obj["settings_store"] = SettingsStore(Path(path).expanduser() if path else None)


@settings_group.command("show")
@click.pass_context
def settings_show(ctx: click.Context) -> None:
    """Print every setting as key = value."""
    for key, value in ctx.obj["settings_store"].load().setting_items():
        click.echo(f"{key} = {value}")


@settings_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def settings_set(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY (for example animation.enabled) to VALUE, parsed as JSON when possible."""
    try:
        updated = ctx.obj["settings_store"].update(key, parse_setting_value(value))
    except KeyError as exc:
        raise click.ClickException(str(exc.args[0]))
    except ValidationError as exc:
        raise click.ClickException(f"Invalid value for {key}: {exc.errors()[0]['msg']}")
    click.echo(f"{key} = {dict(updated.setting_items())[key]}")


@settings_group.command("reset")
@click.pass_context
def settings_reset(ctx: click.Context) -> None:
    """Restore default settings."""
    ctx.obj["settings_store"].reset()
    click.echo("Settings reset to defaults")


@main.command()
def about() -> None:
    """Show version and project summary."""
    payload = {
        "name": "diffstep",
        "version": __version__,
        "description": "Step-through diff viewer for the terminal",
    }
    click.echo(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()

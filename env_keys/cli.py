"""CLI entry point for copy-env-keys-to-env-example."""

from __future__ import annotations

from typing import List, Optional

import click

from .config import Settings
from .sync import CREATED, UNCHANGED, EnvSyncError, SyncOutcome, sync_env_example


class _Command(click.Command):
    """Report usage errors with exit status 1."""

    def parse_args(self, ctx: click.Context, args: List[str]) -> List[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as exc:
            exc.exit_code = 1
            raise


def _load_settings() -> Settings:
    return Settings()


def _validate_output(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[str]:
    if value is not None and (not value or value.startswith("-")):
        raise click.BadParameter("Missing <path> after --output.", ctx=ctx, param=param)
    return value


def _report(settings: Settings, outcome: SyncOutcome) -> None:
    target = settings.display_path(outcome.output_path or settings.output_path)
    if outcome.mode == CREATED:
        click.echo(
            f"Created {target} with keys from "
            f"{settings.primary_source} and {settings.secondary_source}"
        )
        return
    if outcome.mode == UNCHANGED:
        click.echo("Output already contains all keys. Nothing to update.")
        return

    click.echo(f"Updated {target}")
    if outcome.added_keys:
        click.echo(
            f"Added {len(outcome.added_keys)} keys: " + ", ".join(outcome.added_keys)
        )
    if outcome.flagged_keys:
        click.echo(
            f"Flagged {len(outcome.flagged_keys)} keys missing from sources: "
            + ", ".join(outcome.flagged_keys)
        )


@click.command(
    "copy-env-keys-to-env-example",
    cls=_Command,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Print the resulting template to stdout instead of writing it.",
)
@click.option(
    "-o",
    "--output",
    metavar="<path>",
    callback=_validate_output,
    help="Output file path (default: ./.env.example).",
)
def cli(dry_run: bool, output: Optional[str]) -> None:
    """Copy the keys of .env and .env.local into .env.example, without values."""
    settings = _load_settings()
    overrides = {}
    if dry_run:
        overrides["dry_run"] = True
    if output is not None:
        overrides["output"] = output
    if overrides:
        settings = settings.with_overrides(**overrides)

    try:
        outcome = sync_env_example(settings)
    except EnvSyncError as exc:
        raise click.ClickException(str(exc)) from exc

    if settings.dry_run:
        click.echo(outcome.content, nl=False)
        return
    _report(settings, outcome)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

"""CLI entry point for selectag."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

import click

from .config import load_config
from .errors import FormInterrupted, InvalidVersionFormat, SelectagError
from .models import Config
from .prefixes import normalize_prefix, prefix_label
from .release import create_release, create_tag, push_tag
from .shell import step
from .tags import current_version, discover_prefixes
from .verify import check_prefixes, format_result
from .versions import propose_versions, tag_name, validate_version

T = TypeVar("T")

CUSTOM_VERSION = "custom"


@contextmanager
def reporting_errors() -> Iterator[None]:
    """Turn selectag failures and operator aborts into exit status 1."""
    try:
        try:
            yield
        except click.Abort as exc:
            raise FormInterrupted("aborted by operator") from exc
    except SelectagError as exc:
        raise click.ClickException(str(exc)) from exc


def resolve_prefixes(prefix: str) -> list[str]:
    """Use the explicit --prefix if given, otherwise discover from tags."""
    if prefix:
        return [normalize_prefix(prefix)]
    return discover_prefixes()


def choose(title: str, options: Sequence[tuple[str, T]]) -> T:
    """Show a numbered menu and return the value of the picked option."""
    click.echo(title)
    for i, (label, _) in enumerate(options, start=1):
        click.echo(f"  {i}) {label}")
    index = click.prompt("Choice", type=click.IntRange(1, len(options)), default=1)
    return options[index - 1][1]


def _version_input(value: str) -> str:
    try:
        return validate_version(value)
    except InvalidVersionFormat as exc:
        raise click.BadParameter(str(exc)) from exc


def choose_version(current: str) -> str:
    """Pick one of the proposed versions or type a custom one."""
    options = [(c.label, c.version) for c in propose_versions(current)]
    options.append(("custom - enter a version", CUSTOM_VERSION))
    picked = choose("Select a new version", options)
    if picked == CUSTOM_VERSION:
        return click.prompt("New version", value_proc=_version_input)
    return validate_version(picked)


def run_select(prefixes: list[str], config: Config) -> None:
    """Interactive flow: prefix → version → title → tag → push → release.

    Every external step waits for confirmation; declining one ends the flow
    without running it or anything after it.
    """
    if len(prefixes) == 1:
        prefix = prefixes[0]
    else:
        prefix = choose(
            "Select a tag prefix for your release",
            [(prefix_label(p), p) for p in prefixes],
        )

    current = current_version(prefix, config)
    step(f"{prefix_label(prefix)}: current version {current}")
    new_version = choose_version(current)
    title = click.prompt(
        "Release title (e.g., release some feature)", default="", show_default=False
    )

    new_tag = tag_name(prefix, new_version)
    old_tag = tag_name(prefix, current)

    step("Release")
    click.echo(f"Module:  {prefix_label(prefix)}")
    click.echo(f"Version: {current} → {new_version}")
    click.echo(f"Tag:     {new_tag} (on {config.reference})")

    if not click.confirm(f"Create tag {new_tag}?"):
        return
    create_tag(new_tag, title or new_tag, config)

    if not click.confirm(f"Do you want to push {new_tag} to {config.remote} now?"):
        return
    push_tag(new_tag, config)

    if not click.confirm("Do you want to create a GitHub release now?"):
        return
    create_release(new_tag, old_tag, title, config)


@click.group(invoke_without_command=True)
@click.version_option(package_name="selectag")
@click.option(
    "--remote",
    default=None,
    help="Remote holding the reference branch. [default: origin]",
)
@click.option(
    "-b",
    "--branch",
    default=None,
    help="Reference branch. Detected from <remote>/HEAD when omitted.",
)
@click.pass_context
def cli(ctx: click.Context, remote: str | None, branch: str | None) -> None:
    """Select tag prefixes and versions for monorepo module releases."""
    ctx.ensure_object(dict)
    ctx.obj.update(remote=remote, branch=branch)
    if ctx.invoked_subcommand is None:
        ctx.invoke(select)


@cli.command()
@click.option(
    "-p",
    "--prefix",
    default="",
    help=(
        'Tag prefix to release ("root" for no prefix). '
        "Discovered from tags when omitted."
    ),
)
@click.option(
    "--dry-run", is_flag=True, help="Print git/gh commands instead of running them."
)
@click.pass_context
def select(ctx: click.Context, prefix: str, dry_run: bool) -> None:
    """Pick a prefix and next version, then tag, push and draft a release."""
    with reporting_errors():
        config = load_config(**(ctx.find_object(dict) or {}), dry_run=dry_run)
        run_select(resolve_prefixes(prefix), config)


@cli.command()
@click.option(
    "-p",
    "--prefix",
    default="",
    help=(
        'Tag prefix to verify ("root" for no prefix). '
        "Discovered from tags when omitted."
    ),
)
@click.option(
    "-P",
    "--path-based/--no-path-based",
    default=None,
    help="Only count commits under the prefix's directory. [default: path-based]",
)
@click.pass_context
def verify(ctx: click.Context, prefix: str, path_based: bool | None) -> None:
    """Report how many unreleased commits each prefix has."""
    with reporting_errors():
        config = load_config(**(ctx.find_object(dict) or {}), path_based=path_based)
        prefixes = resolve_prefixes(prefix)
        step(f"Checking {len(prefixes)} prefix(es) against {config.reference}")
        for result in check_prefixes(prefixes, config):
            click.echo(format_result(result))

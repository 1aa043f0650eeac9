from __future__ import annotations

import click

from talentspal import __version__
from talentspal.utils.log import set_log_level

from . import commands_api, commands_auth


@click.group(name="talentspal", help="TalentsPal API client")
@click.version_option(__version__, prog_name="talentspal")
@click.option("--log-level", default=None, help="Override LOG_LEVEL for this run.")
def cli(log_level: str | None) -> None:
    if log_level:
        set_log_level(log_level)


commands_auth.add_commands(cli)
commands_api.add_commands(cli)


def main() -> None:
    cli()


__all__ = ["cli", "main"]

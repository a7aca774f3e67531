"""Config command implementation.

Creates and shows the heft config file.
"""

from typing import Annotated

import tomli_w
import typer

from heft.core.config import (
    ConfigError,
    config_to_dict,
    default_file_config,
    load_file_config,
    save_file_config,
)
from heft.core.paths import get_config_path
from heft.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Manage the heft config file.",
    no_args_is_help=True,
)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with every setting spelled out."""
    path = get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        saved = save_file_config(default_file_config(), path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def show() -> None:
    """Print the config file as heft reads it."""
    path = get_config_path()
    try:
        config = load_file_config(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    if not path.exists():
        print_info(f"No config file at {path}, showing defaults.")
        config = default_file_config()
    else:
        print_info(f"# {path}")

    console.print(tomli_w.dumps(config_to_dict(config)), highlight=False, markup=False)

"""Settings CLI commands for uk-pay.

Manages settings.json - data directory and default tax code.
"""

import click
from pathlib import Path

from ukpay.sdk import (
    load_settings,
    save_settings,
    get_setting,
    set_setting,
    get_settings_path,
    get_data_path,
    get_store_path,
    parse_tax_code,
)


@click.group()
def settings():
    """Manage settings (settings.json).

    Available settings:
    - data_dir: custom data directory path
    - default_tax_code: tax code used when none is remembered
    """
    pass


@settings.command("show")
def settings_show():
    """Show current settings and their values."""
    settings_path = get_settings_path()
    current = load_settings()

    click.echo(f"Settings file: {settings_path}")
    click.echo(f"File exists: {settings_path.exists()}")
    click.echo()

    if not current:
        click.echo("No settings configured (using defaults).")
    else:
        click.echo("Current settings:")
        for key, value in current.items():
            click.echo(f"  {key}: {value}")

    click.echo()
    click.echo("Effective paths:")
    click.echo(f"  data_dir: {get_data_path()}{'' if current.get('data_dir') else ' (default)'}")
    click.echo(f"  store: {get_store_path()}")


@settings.command("data-dir")
@click.argument("path", required=False, type=click.Path())
@click.option("--clear", is_flag=True, help="Clear custom data_dir, revert to default")
def settings_data_dir(path, clear):
    """Set or clear the custom data directory.

    PATH is the directory where uk-pay keeps store.json (saved weeks and
    remembered inputs).

    Examples:
        uk-pay settings data-dir ~/Documents/pay
        uk-pay settings data-dir --clear
    """
    if clear:
        current = load_settings()
        if "data_dir" in current:
            del current["data_dir"]
            save_settings(current)
            click.echo("Cleared data_dir setting.")
            click.echo(f"Data directory is now: {get_data_path()} (default)")
        else:
            click.echo("data_dir was not set.")
        return

    if not path:
        # Show current value
        current_data_dir = get_setting("data_dir")
        if current_data_dir:
            click.echo(f"Current data_dir: {current_data_dir}")
        else:
            click.echo(f"No custom data_dir set. Using default: {get_data_path()}")
        return

    data_path = Path(path).expanduser().resolve()

    if data_path.exists():
        if not data_path.is_dir():
            raise click.ClickException(f"Path exists but is not a directory: {data_path}")
    else:
        try:
            data_path.mkdir(parents=True, exist_ok=True)
            click.echo(f"Created directory: {data_path}")
        except OSError as e:
            raise click.ClickException(f"Cannot create directory: {data_path}\n{e}")

    # Check it's writable
    test_file = data_path / ".write_test"
    try:
        test_file.touch()
        test_file.unlink()
    except OSError as e:
        raise click.ClickException(f"Directory is not writable: {data_path}\n{e}")

    set_setting("data_dir", str(data_path))
    click.echo(f"Set data_dir: {data_path}")
    click.echo(f"Saved to: {get_settings_path()}")


@settings.command("default-tax-code")
@click.argument("code", required=False)
@click.option("--clear", is_flag=True, help="Clear the default, revert to C1257L")
def settings_default_tax_code(code, clear):
    """Set or show the default tax code.

    Examples:
        uk-pay settings default-tax-code 1257L
        uk-pay settings default-tax-code --clear
    """
    if clear:
        current = load_settings()
        current.pop("default_tax_code", None)
        save_settings(current)
        click.echo("Cleared default_tax_code setting.")
        return

    if not code:
        click.echo(f"Default tax code: {get_setting('default_tax_code', 'C1257L')}")
        return

    code = code.strip().upper()
    parsed = parse_tax_code(code)
    set_setting("default_tax_code", code)
    click.echo(f"Set default_tax_code: {code} (allowance £{parsed.personal_allowance:,.0f})")

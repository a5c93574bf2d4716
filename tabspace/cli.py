import click


@click.group()
def main() -> None:
    """Tabspace - multi-tab workspace state manager."""


# ---------------------------------------------------------------------------
# Persisted snapshot maintenance
# ---------------------------------------------------------------------------


@main.group()
def snapshot() -> None:
    """Inspect or remove the persisted workspace snapshot."""


@snapshot.command()
@click.option("--key", default=None, help="Storage key (default: from TABSPACE_STORAGE_KEY).")
def show(key: str | None) -> None:
    """Print the saved tabs without modifying the stored snapshot."""
    from tabspace.workspace.app import create_persistence
    from tabspace.workspace.log import setup_logging
    from tabspace.workspace.settings import TabspaceSettings

    settings = TabspaceSettings()
    if key:
        settings = settings.model_copy(update={"storage_key": key})
    setup_logging(settings.log_level)

    persistence = create_persistence(settings)
    saved = persistence.load(purge_invalid=False)
    if saved is None:
        click.echo(f"No usable snapshot under '{persistence.key}'.")
        return

    age_hours = persistence.age(saved).total_seconds() / 3600
    click.echo(f"Snapshot '{persistence.key}' written {saved.timestamp.isoformat()} ({age_hours:.1f}h ago)")
    for tab in saved.tabs:
        marker = "*" if tab.id == saved.active_tab_id else " "
        click.echo(f"{marker} {tab.id}  {tab.title}  {tab.location}")


@snapshot.command()
@click.option("--key", default=None, help="Storage key (default: from TABSPACE_STORAGE_KEY).")
@click.confirmation_option(prompt="Delete the saved workspace?")
def clear(key: str | None) -> None:
    """Delete the saved workspace."""
    from tabspace.workspace.app import create_persistence
    from tabspace.workspace.log import setup_logging
    from tabspace.workspace.settings import TabspaceSettings

    settings = TabspaceSettings()
    if key:
        settings = settings.model_copy(update={"storage_key": key})
    setup_logging(settings.log_level)

    persistence = create_persistence(settings)
    persistence.clear_stored_state()
    click.echo(f"Cleared '{persistence.key}'.")

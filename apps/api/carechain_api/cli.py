"""CLI commands for CareChain API."""

import sys

import click

from carechain_api.db.base import Base
from carechain_api.db.seed import seed_all
from carechain_api.db.session import SessionLocal, engine
from carechain_api.errors import CareChainError
from carechain_api.ledger.service import LedgerService


@click.group()
def cli():
    """CareChain API CLI."""
    pass


@cli.command("init-db")
def init_db():
    """Create all tables (development; use Alembic elsewhere)."""
    import carechain_api.models  # noqa: F401

    Base.metadata.create_all(engine)
    click.echo("✓ Tables created.")


@cli.command()
def seed():
    """Seed initial data."""
    click.echo("Seeding initial data...")
    db = SessionLocal()
    try:
        seed_all(db)
        click.echo("✓ Seed data created.")
    except CareChainError as e:
        click.echo(f"✗ Error seeding data: {e}", err=True)
        db.rollback()
        sys.exit(1)
    finally:
        db.close()


@cli.command("verify-chain")
def verify_chain():
    """Verify ledger hash-chain linkage."""
    db = SessionLocal()
    try:
        service = LedgerService(db)
        broken = service.find_broken_link()
        if broken is None:
            count = len(service.list_entries())
            click.echo(f"✓ Ledger chain intact ({count} entries).")
            return
        click.echo(
            f"✗ Ledger chain broken at sequence {broken.sequence} (entry {broken.entry_id}): "
            f"expected previous hash {broken.expected_previous_hash}, "
            f"found {broken.found_previous_hash}",
            err=True,
        )
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    cli()

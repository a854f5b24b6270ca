"""Tests for the management CLI."""

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from carechain_api.access.service import AccessControlService
from carechain_api.cli import cli
from carechain_api.models import LedgerEntry, MedicalRecord, User


@pytest.fixture
def runner(session_factory):
    with patch("carechain_api.cli.SessionLocal", session_factory):
        yield CliRunner()


def test_seed_is_idempotent(runner, db):
    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0, result.output
    assert "Seed data created" in result.output

    result = runner.invoke(cli, ["seed"])
    assert result.exit_code == 0, result.output

    assert db.query(User).count() == 4
    assert db.query(MedicalRecord).count() == 1
    assert db.query(LedgerEntry).one().action_type == "upload_record"


def test_verify_chain_intact(runner, db, record, doctor):
    AccessControlService(db).grant("patient-A", record.id, doctor.id)

    result = runner.invoke(cli, ["verify-chain"])
    assert result.exit_code == 0
    assert "intact (1 entries)" in result.output


def test_verify_chain_broken(runner, db, record, doctor):
    AccessControlService(db).grant("patient-A", record.id, doctor.id)
    entry = db.query(LedgerEntry).one()
    entry.previous_hash = "0" * 64
    db.commit()

    result = runner.invoke(cli, ["verify-chain"])
    assert result.exit_code == 1
    assert "broken at sequence 1" in result.output

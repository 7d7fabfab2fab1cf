from __future__ import annotations

import pytest
from alembic import command
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import IntegrityError

from webmarcas.database.init_db import _build_alembic_config
from webmarcas.models import Base, BrandProcess, Contract

EXPECTED_TABLES = {
    "users",
    "profiles",
    "leads",
    "contracts",
    "invoices",
    "brand_processes",
    "documents",
    "email_logs",
    "notifications",
    "client_activities",
    "signature_audit_logs",
    "promotion_expiration_logs",
}


def test_metadata_tables():
    assert set(Base.metadata.tables) == EXPECTED_TABLES


def test_migration_matches_models(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_build_alembic_config(url), "head")

    inspector = inspect(create_engine(url))
    assert set(inspector.get_table_names()) - {"alembic_version"} == EXPECTED_TABLES
    for name, table in Base.metadata.tables.items():
        migrated = {column["name"] for column in inspector.get_columns(name)}
        assert migrated == set(table.columns.keys()), name

    unique = inspector.get_unique_constraints("brand_processes")
    assert {"name": "uq_brand_processes_contract", "column_names": ["contract_id"]} in [
        {"name": item["name"], "column_names": item["column_names"]} for item in unique
    ]

    command.downgrade(_build_alembic_config(url), "base")
    assert set(inspect(create_engine(url)).get_table_names()) <= {"alembic_version"}


def test_one_process_per_contract(db_session):
    contract = Contract(subject="Registro de marca: Aurora")
    db_session.add(contract)
    db_session.flush()
    db_session.add(BrandProcess(contract_id=contract.id, brand_name="Aurora"))
    db_session.commit()

    db_session.add(BrandProcess(contract_id=contract.id, brand_name="Aurora"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

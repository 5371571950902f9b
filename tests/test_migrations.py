"""
Tests for the Alembic migration that creates the users table.
Runs upgrade/downgrade against SQLite and checks the ORM model agrees with it.
"""

import importlib.util
from pathlib import Path

import pytest
from alembic.migration import MigrationContext
from alembic.operations import Operations
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from auth_service.db import create_session_factory
from auth_service.repository import UserRepository

MIGRATION_PATH = Path(__file__).resolve().parent.parent / "alembic" / "versions" / "001_initial_users_table.py"


def _load_migration():
    spec = importlib.util.spec_from_file_location("initial_users_table", MIGRATION_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _run(connection, step):
    context = MigrationContext.configure(connection)
    with Operations.context(context):
        step()


def _columns(connection):
    return {column["name"] for column in inspect(connection).get_columns("users")}


def _tables(connection):
    return inspect(connection).get_table_names()


@pytest.mark.asyncio
async def test_upgrade_creates_users_table(tmp_path):
    migration = _load_migration()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_run, migration.upgrade)
            columns = await conn.run_sync(_columns)

        assert columns == {
            "id", "email", "first_name", "last_name", "password",
            "user_active", "created_at", "updated_at",
        }
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_repository_works_on_migrated_schema(tmp_path):
    migration = _load_migration()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_run, migration.upgrade)

        repository = UserRepository(create_session_factory(engine), bcrypt_rounds=4)
        user_id = await repository.insert("a@x.com", "secret", "Ada", "Lovelace", active=0)

        user = await repository.get_by_email("a@x.com")
        assert user.id == user_id
        assert user.active == 0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_downgrade_drops_users_table(tmp_path):
    migration = _load_migration()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_run, migration.upgrade)
            await conn.run_sync(_run, migration.downgrade)
            tables = await conn.run_sync(_tables)

        assert "users" not in tables
    finally:
        await engine.dispose()


def _email_uniqueness(connection):
    inspector = inspect(connection)
    unique_indexes = [
        index["name"] for index in inspector.get_indexes("users")
        if index["unique"] and index["column_names"] == ["email"]
    ]
    unique_constraints = [
        constraint["name"] for constraint in inspector.get_unique_constraints("users")
        if constraint["column_names"] == ["email"]
    ]
    return unique_indexes, unique_constraints


@pytest.mark.asyncio
async def test_email_uniqueness_enforced_once(tmp_path):
    migration = _load_migration()
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'migrated.db'}")
    try:
        async with engine.begin() as conn:
            await conn.run_sync(_run, migration.upgrade)
            unique_indexes, unique_constraints = await conn.run_sync(_email_uniqueness)

        assert unique_indexes == ["ix_users_email"]
        assert unique_constraints == []
    finally:
        await engine.dispose()

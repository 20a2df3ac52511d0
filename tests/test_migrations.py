"""Alembic migrations against a throwaway SQLite file."""

from pathlib import Path

import pytest
import sqlalchemy as sa
from alembic import command
from alembic.config import Config
from sqlalchemy.exc import IntegrityError

from ridehail.infrastructure import models  # noqa: F401
from ridehail.infrastructure.database import Base

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def alembic_config(tmp_path):
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("sqlalchemy.url", f"sqlite:///{tmp_path / 'ridehail.db'}")
    config.attributes["configure_logger"] = False
    return config


def engine_for(config):
    return sa.create_engine(config.get_main_option("sqlalchemy.url"))


class TestInitialSchema:
    def test_upgrade_matches_models(self, alembic_config):
        command.upgrade(alembic_config, "head")

        inspector = sa.inspect(engine_for(alembic_config))
        assert {"vehicles", "reviews", "alembic_version"} <= set(
            inspector.get_table_names()
        )
        for table in Base.metadata.sorted_tables:
            migrated = {c["name"] for c in inspector.get_columns(table.name)}
            assert migrated == set(table.columns.keys())
        indexes = {i["name"] for i in inspector.get_indexes("reviews")}
        assert {"idx_reviews_email", "idx_reviews_vehicle"} <= indexes

    def test_completed_review_without_rate_rejected(self, alembic_config):
        command.upgrade(alembic_config, "head")

        with pytest.raises(IntegrityError):
            with engine_for(alembic_config).begin() as conn:
                conn.execute(
                    sa.text(
                        "INSERT INTO reviews "
                        "(uuid, email, vehicle_id, date_of_ride, price, completed) "
                        "VALUES ('r1', 'anna@example.com', 'v1', "
                        "'2026-05-10 00:00:00', 10.0, 1)"
                    )
                )

    def test_downgrade_drops_tables(self, alembic_config):
        command.upgrade(alembic_config, "head")
        command.downgrade(alembic_config, "base")

        tables = set(sa.inspect(engine_for(alembic_config)).get_table_names())
        assert not {"vehicles", "reviews"} & tables

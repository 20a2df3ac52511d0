"""Initial schema: vehicles and reviews.

Revision ID: 001
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa


revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # ── vehicles ──────────────────────────────────────────────────────
    op.create_table(
        "vehicles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(36), unique=True, nullable=False),
        sa.Column("brand", sa.String(80), nullable=False),
        sa.Column("first_name", sa.String(80), nullable=False),
        sa.Column("last_name", sa.String(80), nullable=False),
        sa.Column("latitude", sa.Float, nullable=False),
        sa.Column("longitude", sa.Float, nullable=False),
        sa.Column("price_per_km", sa.Float, nullable=False),
        sa.Column("start_price", sa.Float, nullable=False),
        sa.Column("booked", sa.Boolean, default=False, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
        ),
    )

    # ── reviews ───────────────────────────────────────────────────────
    op.create_table(
        "reviews",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("uuid", sa.String(36), unique=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("vehicle_id", sa.String(36), nullable=False),
        sa.Column("date_of_ride", sa.DateTime(timezone=True), nullable=False),
        sa.Column("price", sa.Float, nullable=False),
        sa.Column("completed", sa.Boolean, default=False, nullable=False),
        sa.Column("rate", sa.Float, nullable=True),
        sa.Column("comment", sa.Text, nullable=True),
        sa.CheckConstraint(
            "(completed AND rate IS NOT NULL) "
            "OR (NOT completed AND rate IS NULL AND comment IS NULL)",
            name="ck_reviews_rated_iff_completed",
        ),
    )
    op.create_index("idx_reviews_email", "reviews", ["email"])
    op.create_index("idx_reviews_vehicle", "reviews", ["vehicle_id"])


def downgrade() -> None:
    op.drop_table("reviews")
    op.drop_table("vehicles")

"""contestants and winners

Revision ID: 0001
Revises:
Create Date: 2026-10-16 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def upgrade() -> None:
    op.create_table(
        "contestants",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("supervisor", sa.String(length=255), nullable=True),
        sa.Column("tickets", sa.Integer(), nullable=False),
        sa.Column("draw_type", sa.String(length=32), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_contestants"),
        sa.UniqueConstraint("name", "draw_type", name="uq_contestants_name_draw_type"),
    )
    op.create_index("ix_contestants_name", "contestants", ["name"])
    op.create_index("ix_contestants_draw_type", "contestants", ["draw_type"])

    op.create_table(
        "winners",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("contestant_id", ID_TYPE, nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("supervisor", sa.String(length=255), nullable=True),
        sa.Column("tickets", sa.Integer(), nullable=False),
        sa.Column("draw_type", sa.String(length=32), nullable=False),
        sa.Column("draw_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("synced", sa.Boolean(), nullable=False),
        sa.Column("remote_id", sa.String(length=64), nullable=True),
        sa.ForeignKeyConstraint(
            ["contestant_id"],
            ["contestants.id"],
            name="fk_winners_contestant_id_contestants",
            ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name="pk_winners"),
        sa.UniqueConstraint("name", name="uq_winners_name"),
    )
    op.create_index(
        "ix_winners_draw_type_draw_date", "winners", ["draw_type", "draw_date"]
    )


def downgrade() -> None:
    op.drop_index("ix_winners_draw_type_draw_date", table_name="winners")
    op.drop_table("winners")
    op.drop_index("ix_contestants_draw_type", table_name="contestants")
    op.drop_index("ix_contestants_name", table_name="contestants")
    op.drop_table("contestants")

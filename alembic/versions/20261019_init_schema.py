"""Init schema: devices, apps, device_records

Revision ID: 20261019_init_schema
Revises:
Create Date: 2026-10-19 12:00:00

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_init_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # devices
    op.create_table(
        "devices",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(), nullable=False, server_default=""),
        sa.Column("owner", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(), nullable=False, server_default=""),
        sa.Column("status", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("proposer", sa.String(), nullable=False, server_default=""),
        sa.Column("real_firmware", sa.String(), nullable=False, server_default=""),
        sa.Column("configurable", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("state", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bulk_upload", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("data_channel", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("upload_period", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bulk_upload_sampling_cnt", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bulk_upload_sampling_freq", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("beep", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_devices_id", "devices", ["id"], unique=False)
    op.create_index("ix_devices_owner", "devices", ["owner"], unique=False)

    # apps
    op.create_table(
        "apps",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("version", sa.String(), nullable=False, server_default=""),
        sa.Column("uri", sa.String(), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(), nullable=False, server_default=""),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_apps_id", "apps", ["id"], unique=False)

    # device_records
    op.create_table(
        "device_records",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("imei", sa.String(), nullable=False),
        sa.Column("operator", sa.String(), nullable=False, server_default=""),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("signature", sa.String(), nullable=False, server_default=""),
        sa.Column("snr", sa.String(), nullable=False, server_default=""),
        sa.Column("vbat", sa.String(), nullable=False, server_default=""),
        sa.Column("latitude", sa.String(), nullable=False, server_default=""),
        sa.Column("longitude", sa.String(), nullable=False, server_default=""),
        sa.Column("gas_resistance", sa.String(), nullable=False, server_default=""),
        sa.Column("temperature", sa.String(), nullable=False, server_default=""),
        sa.Column("temperature2", sa.String(), nullable=False, server_default=""),
        sa.Column("pressure", sa.String(), nullable=False, server_default=""),
        sa.Column("humidity", sa.String(), nullable=False, server_default=""),
        sa.Column("light", sa.String(), nullable=False, server_default=""),
        sa.Column("gyroscope", sa.Text(), nullable=False, server_default=""),
        sa.Column("accelerometer", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_device_records_id", "device_records", ["id"], unique=False)
    op.create_index("ix_device_records_imei", "device_records", ["imei"], unique=False)
    op.create_index("ix_device_records_timestamp", "device_records", ["timestamp"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_device_records_timestamp", table_name="device_records")
    op.drop_index("ix_device_records_imei", table_name="device_records")
    op.drop_index("ix_device_records_id", table_name="device_records")
    op.drop_table("device_records")

    op.drop_index("ix_apps_id", table_name="apps")
    op.drop_table("apps")

    op.drop_index("ix_devices_owner", table_name="devices")
    op.drop_index("ix_devices_id", table_name="devices")
    op.drop_table("devices")

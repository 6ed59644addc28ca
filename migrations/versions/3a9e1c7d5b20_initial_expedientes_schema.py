"""initial expedientes, mandatos and documentos schema

Revision ID: 3a9e1c7d5b20
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3a9e1c7d5b20"
down_revision = None
branch_labels = None
depends_on = None

ROLES = ("ADMIN", "REVISOR", "ASESOR")
EXPEDIENTE_ESTADOS = ("PENDIENTE", "APROBADO", "RECHAZADO")
MANDATO_ESTADOS = ("BORRADOR", "ENVIADO", "FIRMADO", "ANULADO")
MONEDAS = ("ARS", "USD")
DOCUMENTO_TIPOS = ("ESCRITURA", "DNI", "API", "TGI", "OTRO")


def upgrade():
    op.create_table(
        "usuario",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("rol", sa.Enum(*ROLES, name="usuario_rol"), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "expediente",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("titulo", sa.String(length=200), nullable=False),
        sa.Column("descripcion", sa.Text(), nullable=True),
        sa.Column("direccion", sa.String(length=255), nullable=True),
        sa.Column("propietario_nombre", sa.String(length=200), nullable=False),
        sa.Column("estado", sa.Enum(*EXPEDIENTE_ESTADOS, name="expediente_estado"), nullable=False),
        sa.Column("asesor_id", sa.Integer(), nullable=False),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["asesor_id"], ["usuario.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_expediente_asesor_estado", "expediente", ["asesor_id", "estado"], unique=False)
    op.create_index("ix_expediente_created_at", "expediente", ["created_at"], unique=False)

    op.create_table(
        "mandato",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("expediente_id", sa.Integer(), nullable=False),
        sa.Column("plazo_dias", sa.Integer(), nullable=False),
        sa.Column("monto", sa.Numeric(14, 2), nullable=False),
        sa.Column("moneda", sa.Enum(*MONEDAS, name="moneda"), nullable=False, server_default="ARS"),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("estado", sa.Enum(*MANDATO_ESTADOS, name="mandato_estado"), nullable=False),
        sa.Column("firmado_por", sa.String(length=200), nullable=True),
        sa.Column("firmado_fecha", sa.DateTime(), nullable=True),
        sa.Column("documento_url", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("plazo_dias > 0", name="ck_mandato_plazo_positivo"),
        sa.CheckConstraint("monto > 0", name="ck_mandato_monto_positivo"),
        sa.ForeignKeyConstraint(["expediente_id"], ["expediente.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("expediente_id"),
    )

    op.create_table(
        "documento",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("expediente_id", sa.Integer(), nullable=False),
        sa.Column("tipo", sa.Enum(*DOCUMENTO_TIPOS, name="documento_tipo"), nullable=False),
        sa.Column("ruta", sa.String(length=500), nullable=False),
        sa.Column("nombre_original", sa.String(length=255), nullable=False),
        sa.Column("tamano", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("mimetype", sa.String(length=120), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["expediente_id"], ["expediente.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("documento", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_documento_expediente_id"), ["expediente_id"], unique=False)


def downgrade():
    with op.batch_alter_table("documento", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_documento_expediente_id"))
    op.drop_table("documento")
    op.drop_table("mandato")
    op.drop_index("ix_expediente_created_at", table_name="expediente")
    op.drop_index("ix_expediente_asesor_estado", table_name="expediente")
    op.drop_table("expediente")
    op.drop_table("usuario")

    bind = op.get_bind()
    if bind.dialect.name == "postgresql":
        for enum_name in ("documento_tipo", "mandato_estado", "moneda", "expediente_estado", "usuario_rol"):
            op.execute(sa.text(f"DROP TYPE IF EXISTS {enum_name}"))

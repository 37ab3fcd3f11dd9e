"""Initial schema for the document portal

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000

NOTE: dossier_documenten.blob_path is Text (not VARCHAR(255)): category
folders plus UUID filenames can exceed 255 chars with long category names.
document_audit_log carries no foreign keys so denied attempts against
unknown dossiers or documents can still be recorded.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, dossiers, guests, categories, documents and audit tables."""
    op.create_table(
        'gebruikers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('naam', sa.String(length=255), nullable=True),
        sa.Column('aangemaakt_op', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )

    op.create_table(
        'dossiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dossier_nummer', sa.String(length=50), nullable=False),
        sa.Column('gebruiker_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.Boolean(), nullable=False),
        sa.Column('aangemaakt_op', sa.DateTime(), nullable=False),
        sa.Column('gewijzigd_op', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['gebruiker_id'], ['gebruikers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('dossier_nummer')
    )
    op.create_index(op.f('ix_dossiers_gebruiker_id'), 'dossiers', ['gebruiker_id'], unique=False)

    op.create_table(
        'gedeelde_dossiers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dossier_id', sa.Integer(), nullable=False),
        sa.Column('gebruiker_id', sa.Integer(), nullable=False),
        sa.Column('gedeeld_op', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['dossier_id'], ['dossiers.id']),
        sa.ForeignKeyConstraint(['gebruiker_id'], ['gebruikers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('dossier_id', 'gebruiker_id', name='uq_gedeelde_dossiers_dossier_gebruiker')
    )
    op.create_index(op.f('ix_gedeelde_dossiers_dossier_id'), 'gedeelde_dossiers', ['dossier_id'], unique=False)
    op.create_index(op.f('ix_gedeelde_dossiers_gebruiker_id'), 'gedeelde_dossiers', ['gebruiker_id'], unique=False)

    op.create_table(
        'dossier_gasten',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dossier_id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('naam', sa.String(length=255), nullable=True),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('token_verloopt_op', sa.DateTime(), nullable=False),
        sa.Column('rechten', sa.String(length=20), nullable=False),
        sa.Column('uitgenodigd_door_gebruiker_id', sa.Integer(), nullable=False),
        sa.Column('uitnodiging_verzonden_op', sa.DateTime(), nullable=True),
        sa.Column('eerste_toegang_op', sa.DateTime(), nullable=True),
        sa.Column('laatste_toegang_op', sa.DateTime(), nullable=True),
        sa.Column('ingetrokken', sa.Boolean(), nullable=False),
        sa.Column('ingetrokken_op', sa.DateTime(), nullable=True),
        sa.Column('aangemaakt_op', sa.DateTime(), nullable=False),
        sa.CheckConstraint("rechten IN ('upload', 'view', 'upload_view')", name='ck_dossier_gasten_rechten'),
        sa.ForeignKeyConstraint(['dossier_id'], ['dossiers.id']),
        sa.ForeignKeyConstraint(['uitgenodigd_door_gebruiker_id'], ['gebruikers.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('dossier_id', 'email', name='uq_dossier_gasten_dossier_email')
    )
    op.create_index(op.f('ix_dossier_gasten_dossier_id'), 'dossier_gasten', ['dossier_id'], unique=False)
    op.create_index(op.f('ix_dossier_gasten_token_hash'), 'dossier_gasten', ['token_hash'], unique=True)

    op.create_table(
        'document_categorieen',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('naam', sa.String(length=100), nullable=False),
        sa.Column('beschrijving', sa.String(length=500), nullable=True),
        sa.Column('icoon', sa.String(length=50), nullable=True),
        sa.Column('toegestane_extensies', sa.String(length=255), nullable=True),
        sa.Column('max_bestandsgrootte_mb', sa.Integer(), nullable=False),
        sa.Column('volgorde', sa.Integer(), nullable=False),
        sa.Column('actief', sa.Boolean(), nullable=False),
        sa.Column('aangemaakt_op', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('naam')
    )

    op.create_table(
        'dossier_documenten',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dossier_id', sa.Integer(), nullable=False),
        sa.Column('categorie_id', sa.Integer(), nullable=False),
        sa.Column('blob_container', sa.String(length=63), nullable=False),
        sa.Column('blob_path', sa.Text(), nullable=False),
        sa.Column('originele_bestandsnaam', sa.String(length=255), nullable=False),
        sa.Column('opgeslagen_bestandsnaam', sa.String(length=255), nullable=False),
        sa.Column('bestandsgrootte', sa.Integer(), nullable=False),
        sa.Column('mime_type', sa.String(length=255), nullable=False),
        sa.Column('geupload_door_gebruiker_id', sa.Integer(), nullable=True),
        sa.Column('geupload_door_gast_id', sa.Integer(), nullable=True),
        sa.Column('upload_ip', sa.String(length=45), nullable=True),
        sa.Column('aangemaakt_op', sa.DateTime(), nullable=False),
        sa.Column('verwijderd_op', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            '(geupload_door_gebruiker_id IS NULL) <> (geupload_door_gast_id IS NULL)',
            name='ck_dossier_documenten_uploader'
        ),
        sa.ForeignKeyConstraint(['categorie_id'], ['document_categorieen.id']),
        sa.ForeignKeyConstraint(['dossier_id'], ['dossiers.id']),
        sa.ForeignKeyConstraint(['geupload_door_gast_id'], ['dossier_gasten.id']),
        sa.ForeignKeyConstraint(['geupload_door_gebruiker_id'], ['gebruikers.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_dossier_documenten_dossier_id'), 'dossier_documenten', ['dossier_id'], unique=False)
    op.create_index(op.f('ix_dossier_documenten_aangemaakt_op'), 'dossier_documenten', ['aangemaakt_op'], unique=False)

    op.create_table(
        'document_audit_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('dossier_id', sa.Integer(), nullable=True),
        sa.Column('document_id', sa.Integer(), nullable=True),
        sa.Column('gebruiker_id', sa.Integer(), nullable=True),
        sa.Column('gast_id', sa.Integer(), nullable=True),
        sa.Column('ip_adres', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('actie', sa.String(length=50), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('tijdstip', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_document_audit_log_dossier_id'), 'document_audit_log', ['dossier_id'], unique=False)
    op.create_index(op.f('ix_document_audit_log_document_id'), 'document_audit_log', ['document_id'], unique=False)
    op.create_index(op.f('ix_document_audit_log_gast_id'), 'document_audit_log', ['gast_id'], unique=False)
    op.create_index(op.f('ix_document_audit_log_actie'), 'document_audit_log', ['actie'], unique=False)
    op.create_index(op.f('ix_document_audit_log_tijdstip'), 'document_audit_log', ['tijdstip'], unique=False)


def downgrade() -> None:
    """Drop all document portal tables."""
    op.drop_index(op.f('ix_document_audit_log_tijdstip'), table_name='document_audit_log')
    op.drop_index(op.f('ix_document_audit_log_actie'), table_name='document_audit_log')
    op.drop_index(op.f('ix_document_audit_log_gast_id'), table_name='document_audit_log')
    op.drop_index(op.f('ix_document_audit_log_document_id'), table_name='document_audit_log')
    op.drop_index(op.f('ix_document_audit_log_dossier_id'), table_name='document_audit_log')
    op.drop_table('document_audit_log')
    op.drop_index(op.f('ix_dossier_documenten_aangemaakt_op'), table_name='dossier_documenten')
    op.drop_index(op.f('ix_dossier_documenten_dossier_id'), table_name='dossier_documenten')
    op.drop_table('dossier_documenten')
    op.drop_table('document_categorieen')
    op.drop_index(op.f('ix_dossier_gasten_token_hash'), table_name='dossier_gasten')
    op.drop_index(op.f('ix_dossier_gasten_dossier_id'), table_name='dossier_gasten')
    op.drop_table('dossier_gasten')
    op.drop_index(op.f('ix_gedeelde_dossiers_gebruiker_id'), table_name='gedeelde_dossiers')
    op.drop_index(op.f('ix_gedeelde_dossiers_dossier_id'), table_name='gedeelde_dossiers')
    op.drop_table('gedeelde_dossiers')
    op.drop_index(op.f('ix_dossiers_gebruiker_id'), table_name='dossiers')
    op.drop_table('dossiers')
    op.drop_table('gebruikers')

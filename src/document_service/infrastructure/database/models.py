"""
Database Models

SQLAlchemy ORM models for the document portal: dossiers and their sharing
grants, guest invitations, document categories, document metadata and the
document audit trail. Table and column names follow the existing Dutch schema.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

from document_service.core.clock import utcnow

Base = declarative_base()


class GebruikerDB(Base):
    """Registered user (account holder)"""

    __tablename__ = "gebruikers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False, unique=True)
    naam = Column(String(255), nullable=True)
    aangemaakt_op = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<GebruikerDB(id={self.id}, email='{self.email}')>"


class DossierDB(Base):
    """Case file; the tenancy boundary for all documents and guests"""

    __tablename__ = "dossiers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    dossier_nummer = Column(String(50), nullable=False, unique=True)
    gebruiker_id = Column(Integer, ForeignKey("gebruikers.id"), nullable=False, index=True)
    status = Column(Boolean, nullable=False, default=False)
    aangemaakt_op = Column(DateTime, nullable=False, default=utcnow)
    gewijzigd_op = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<DossierDB(id={self.id}, dossier_nummer='{self.dossier_nummer}')>"


class GedeeldDossierDB(Base):
    """Standing access grant of a dossier to a non-owner user"""

    __tablename__ = "gedeelde_dossiers"
    __table_args__ = (
        UniqueConstraint("dossier_id", "gebruiker_id", name="uq_gedeelde_dossiers_dossier_gebruiker"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dossier_id = Column(Integer, ForeignKey("dossiers.id"), nullable=False, index=True)
    gebruiker_id = Column(Integer, ForeignKey("gebruikers.id"), nullable=False, index=True)
    gedeeld_op = Column(DateTime, nullable=False, default=utcnow)


class DossierGastDB(Base):
    """Guest invitation bound to exactly one dossier"""

    __tablename__ = "dossier_gasten"
    __table_args__ = (
        UniqueConstraint("dossier_id", "email", name="uq_dossier_gasten_dossier_email"),
        CheckConstraint("rechten IN ('upload', 'view', 'upload_view')", name="ck_dossier_gasten_rechten"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dossier_id = Column(Integer, ForeignKey("dossiers.id"), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    naam = Column(String(255), nullable=True)
    token_hash = Column(String(64), nullable=False, unique=True, index=True)
    token_verloopt_op = Column(DateTime, nullable=False)
    rechten = Column(String(20), nullable=False, default="upload_view")
    uitgenodigd_door_gebruiker_id = Column(Integer, ForeignKey("gebruikers.id"), nullable=False)
    uitnodiging_verzonden_op = Column(DateTime, nullable=True)
    eerste_toegang_op = Column(DateTime, nullable=True)
    laatste_toegang_op = Column(DateTime, nullable=True)
    ingetrokken = Column(Boolean, nullable=False, default=False)
    ingetrokken_op = Column(DateTime, nullable=True)
    aangemaakt_op = Column(DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f"<DossierGastDB(id={self.id}, dossier_id={self.dossier_id}, email='{self.email}')>"


class DocumentCategorieDB(Base):
    """Document bucket with upload restrictions"""

    __tablename__ = "document_categorieen"

    id = Column(Integer, primary_key=True, autoincrement=True)
    naam = Column(String(100), nullable=False, unique=True)
    beschrijving = Column(String(500), nullable=True)
    icoon = Column(String(50), nullable=True)
    toegestane_extensies = Column(String(255), nullable=True)
    max_bestandsgrootte_mb = Column(Integer, nullable=False, default=10)
    volgorde = Column(Integer, nullable=False, default=0)
    actief = Column(Boolean, nullable=False, default=True)
    aangemaakt_op = Column(DateTime, nullable=False, default=utcnow)


class DossierDocumentDB(Base):
    """Uploaded document metadata (the binary lives in blob storage)"""

    __tablename__ = "dossier_documenten"
    __table_args__ = (
        CheckConstraint(
            "(geupload_door_gebruiker_id IS NULL) <> (geupload_door_gast_id IS NULL)",
            name="ck_dossier_documenten_uploader",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    dossier_id = Column(Integer, ForeignKey("dossiers.id"), nullable=False, index=True)
    categorie_id = Column(Integer, ForeignKey("document_categorieen.id"), nullable=False)
    blob_container = Column(String(63), nullable=False)
    blob_path = Column(Text, nullable=False)
    originele_bestandsnaam = Column(String(255), nullable=False)
    opgeslagen_bestandsnaam = Column(String(255), nullable=False)
    bestandsgrootte = Column(Integer, nullable=False)
    mime_type = Column(String(255), nullable=False)
    geupload_door_gebruiker_id = Column(Integer, ForeignKey("gebruikers.id"), nullable=True)
    geupload_door_gast_id = Column(Integer, ForeignKey("dossier_gasten.id"), nullable=True)
    upload_ip = Column(String(45), nullable=True)
    aangemaakt_op = Column(DateTime, nullable=False, default=utcnow, index=True)
    verwijderd_op = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<DossierDocumentDB(id={self.id}, filename='{self.originele_bestandsnaam}')>"


class DocumentAuditLogDB(Base):
    """Append-only audit trail entry. Rows are never updated or deleted."""

    __tablename__ = "document_audit_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # No foreign keys: denials may reference dossiers or documents that do not exist
    dossier_id = Column(Integer, nullable=True, index=True)
    document_id = Column(Integer, nullable=True, index=True)
    gebruiker_id = Column(Integer, nullable=True)
    gast_id = Column(Integer, nullable=True, index=True)
    ip_adres = Column(String(45), nullable=True)
    user_agent = Column(String(500), nullable=True)
    actie = Column(String(50), nullable=False, index=True)
    details = Column(JSON, nullable=True)
    tijdstip = Column(DateTime, nullable=False, default=utcnow, index=True)

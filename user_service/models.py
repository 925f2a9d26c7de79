"""Define el modelo de la tabla 'users' usando SQLAlchemy ORM."""

from sqlalchemy import Column, Integer, String, DateTime, UniqueConstraint, func

from user_service.db import Base


class User(Base):
    """
    Modelo SQLAlchemy que representa la tabla 'users'.
    La unicidad del email la garantiza la BD (uq_users_email), no solo la API.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    # Comparación sin distinguir mayúsculas, como utf8mb4_unicode_ci en MySQL
    email = Column(String(100).with_variant(String(100, collation="NOCASE"), "sqlite"), nullable=False)
    phone = Column(String(20), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        # SQLite reutiliza el rowid más alto sin AUTOINCREMENT
        {"sqlite_autoincrement": True, "mysql_charset": "utf8mb4", "mysql_collate": "utf8mb4_unicode_ci"},
    )

    def __repr__(self):
        return f"<User id={self.id} email={self.email!r}>"

"""
Credential Model
Client credentials exchanged for bearer tokens
"""

from sqlalchemy import Column, String

from vtn.core.database import Base
from vtn.models.base import JSONType, TimestampMixin


class CredentialModel(Base, TimestampMixin):
    """Client id with its hashed secret and granted roles"""
    __tablename__ = "credentials"

    client_id = Column(String(128), primary_key=True)
    secret_hash = Column(String(128), nullable=False)

    # List of {"role": ..., "id": ...} claims
    roles = Column(JSONType, default=list, nullable=False)

    def __repr__(self):
        return f"<Credential(client_id='{self.client_id}')>"

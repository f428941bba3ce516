"""
Credential Repository
Database operations for client credentials
"""

from vtn.models.credential import CredentialModel
from vtn.repositories.base import CRUDBase


credential_repository = CRUDBase(CredentialModel, key="client_id")

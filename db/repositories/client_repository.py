"""
Repository for client lookups and organization scoping.
"""

from __future__ import annotations

import uuid

from sqlalchemy.orm import Session

from db.models.client import Client
from db.repositories.errors import ClientAccessError, ClientInactiveError, ClientNotFoundError


class ClientRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_client(self, client_id: uuid.UUID) -> Client | None:
        return self._session.get(Client, client_id)

    def ensure_client_access(
        self,
        *,
        client_id: uuid.UUID,
        organization_id: uuid.UUID,
    ) -> Client:
        """
        Return the client if it exists, is active and belongs to the organization.
        """

        client = self.get_client(client_id)
        if client is None:
            raise ClientNotFoundError(f"Client '{client_id}' was not found.")
        if client.organization_id != organization_id:
            raise ClientAccessError(f"Client '{client_id}' does not belong to this organization.")
        if not client.is_active:
            raise ClientInactiveError(f"Client '{client_id}' is inactive.")
        return client

from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

OBJECT_STORE_TYPE = "object-store"

# Request document for the identity exchange.
class ApiKeyCredentials(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)
    username: str = Field(..., min_length=1, description="Account username.")
    api_key: str = Field(..., min_length=1, alias="apiKey", description="API key used in place of a password.")

    def to_auth_document(self) -> dict:
        return {"auth": {"RAX-KSKEY:apiKeyCredentials": self.model_dump(by_alias=True)}}

# Response document.
class Token(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)
    id: str = Field(..., description="Token sent as X-Auth-Token on every request.")
    expires: Optional[str] = Field(None, description="Expiry timestamp as reported by the identity service.")

class EntryEndpoint(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)
    region: Optional[str] = Field(None, description="Region the endpoint serves.")
    tenant_id: Optional[str] = Field(None, alias="tenantId")
    public_url: Optional[str] = Field(None, alias="publicURL", description="Endpoint reachable from the internet.")
    internal_url: Optional[str] = Field(None, alias="internalURL", description="Endpoint reachable from inside the region.")

class CatalogEntry(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)
    name: Optional[str] = Field(None, description="Service name, e.g. 'cloudFiles'.")
    type: str = Field(..., description="Service type, 'object-store' for object storage.")
    endpoints: list[EntryEndpoint] = Field(default_factory=list)

class Access(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)
    token: Token
    service_catalog: list[CatalogEntry] = Field(default_factory=list, alias="serviceCatalog")

class AccessResponse(BaseModel):
    model_config = ConfigDict(extra='ignore', populate_by_name=True)
    access: Access

    def object_store_endpoint(self, region: str) -> Optional[str]:
        """Public URL of the first object-store entry whose region matches exactly, else None."""
        for service in self.access.service_catalog:
            if service.type != OBJECT_STORE_TYPE:
                continue
            for endpoint in service.endpoints:
                if endpoint.region == region and endpoint.public_url:
                    return endpoint.public_url
            break
        return None

"""Pydantic schemas for manifest output."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ============================================
# Base Schemas
# ============================================

class ManifestModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_manifest(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class BindingManifest(ManifestModel):
    scheme: str
    protocol: str
    transport: str
    port: Optional[int] = None
    target_port: Optional[int] = None
    external: Optional[bool] = None


class VolumeManifest(ManifestModel):
    name: Optional[str] = None
    target: str
    read_only: bool = False


class BindMountManifest(ManifestModel):
    source: str
    target: str
    read_only: bool = False


# ============================================
# Resource Schemas
# ============================================

class ContainerManifest(ManifestModel):
    """Manifest for a container resource."""

    type: Literal["container.v0"] = "container.v0"
    connection_string: Optional[str] = None
    image: str
    volumes: Optional[List[VolumeManifest]] = None
    bind_mounts: Optional[List[BindMountManifest]] = None
    env: Dict[str, str] = {}
    bindings: Dict[str, BindingManifest] = {}


class ValueManifest(ManifestModel):
    """Manifest for a resource that only carries a connection string."""

    type: Literal["value.v0"] = "value.v0"
    connection_string: str

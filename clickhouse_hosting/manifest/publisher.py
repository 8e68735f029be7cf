"""Writes the manifest entries consumed by deployment tooling."""

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

from clickhouse_hosting.core.errors import ResourceValidationError
from clickhouse_hosting.domain.models import (
    ContainerMountType,
    ContainerResource,
    Resource,
    ResourceWithConnectionString,
)
from clickhouse_hosting.manifest.schemas import (
    BindingManifest,
    BindMountManifest,
    ContainerManifest,
    ManifestModel,
    ValueManifest,
    VolumeManifest,
)


def build_manifest(resource: Resource) -> Optional[ManifestModel]:
    """Manifest model for a resource, or None if it is not published."""
    connection_string = None
    if isinstance(resource, ResourceWithConnectionString):
        connection_string = resource.connection_string_expression.value_expression

    if isinstance(resource, ContainerResource) and resource.image is not None:
        return _container_manifest(resource, connection_string)

    if connection_string is not None:
        return ValueManifest(connection_string=connection_string)

    return None


def get_manifest(resource: Resource) -> Dict[str, Any]:
    manifest = build_manifest(resource)
    if manifest is None:
        raise ResourceValidationError("resource", f"'{resource.name}' has no manifest representation")
    return manifest.to_manifest()


def manifest_json(resource: Resource) -> str:
    return json.dumps(get_manifest(resource), indent=2)


def get_application_manifest(resources: Iterable[Resource]) -> Dict[str, Any]:
    """{"resources": {name: manifest}} for every published resource."""
    entries = {}
    for resource in resources:
        manifest = build_manifest(resource)
        if manifest is not None:
            entries[resource.name] = manifest.to_manifest()
    return {"resources": entries}


def get_connection_property_templates(resource: ResourceWithConnectionString) -> List[Tuple[str, str]]:
    """Ordered (property, template) pairs."""
    return [
        (name, expression.value_expression)
        for name, expression in resource.get_connection_properties()
    ]


def _container_manifest(resource: ContainerResource, connection_string: Optional[str]) -> ContainerManifest:
    env = {
        key: value if isinstance(value, str) else value.value_expression
        for key, value in resource.environment_variables().items()
    }

    bindings = {
        endpoint.name: BindingManifest(
            scheme=endpoint.scheme,
            protocol=endpoint.protocol,
            transport=endpoint.transport,
            port=endpoint.port,
            target_port=endpoint.target_port,
            external=True if endpoint.is_external else None,
        )
        for endpoint in resource.endpoints
    }

    volumes = [
        VolumeManifest(name=m.source, target=m.target, read_only=m.is_read_only)
        for m in resource.mounts if m.type == ContainerMountType.VOLUME
    ]
    bind_mounts = [
        BindMountManifest(source=m.source, target=m.target, read_only=m.is_read_only)
        for m in resource.mounts if m.type == ContainerMountType.BIND_MOUNT
    ]

    return ContainerManifest(
        connection_string=connection_string,
        image=resource.image.full_image,
        volumes=volumes or None,
        bind_mounts=bind_mounts or None,
        env=env,
        bindings=bindings,
    )

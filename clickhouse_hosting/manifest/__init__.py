"""Manifest publishing."""

from .publisher import (
    build_manifest,
    get_application_manifest,
    get_connection_property_templates,
    get_manifest,
    manifest_json,
)


__all__ = [
    "build_manifest",
    "get_application_manifest",
    "get_connection_property_templates",
    "get_manifest",
    "manifest_json",
]

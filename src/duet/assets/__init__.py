"""Assets — manifest-based resolution of content-addressed file names."""

from duet.assets.manifest import AssetDomain, Manifest, fallback_path, load_manifest, resolve
from duet.assets.resolver import AssetResolver

__all__ = [
    "AssetDomain",
    "AssetResolver",
    "Manifest",
    "fallback_path",
    "load_manifest",
    "resolve",
]

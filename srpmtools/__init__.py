"""
srpmtools - metadata extraction and patch application for source RPMs.
"""

__version__ = "0.1.0"
__author__ = "srpmtools Team"

from srpmtools.analyzer import SpecAnalyzer, TagExtractor, locate_spec, normalize_spec
from srpmtools.builder import PatchApplier, SRPMPipeline
from srpmtools.buildtree import BuildTreeManager
from srpmtools.fetcher import SRPMFetcher
from srpmtools.metadata import PackageMetadata, SpecTag, extract_bundled, resolve_source0

__all__ = [
    "SpecAnalyzer",
    "TagExtractor",
    "locate_spec",
    "normalize_spec",
    "PatchApplier",
    "SRPMPipeline",
    "BuildTreeManager",
    "SRPMFetcher",
    "PackageMetadata",
    "SpecTag",
    "extract_bundled",
    "resolve_source0",
]

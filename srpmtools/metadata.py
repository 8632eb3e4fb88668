"""
Package metadata extracted from a source RPM and facts derived from it.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any

from srpmtools.exceptions import NoSourcesError

BUNDLED_PATTERN = re.compile(r"^bundled\((.+)\)(?:\s*=\s*(\S+))?\s*$")


@dataclass(frozen=True)
class SpecTag:
    """A single directive from a spec file, e.g. Source0: foo.tar.gz."""

    name: str
    value: str

    def __str__(self) -> str:
        return f"{self.name}: {self.value}"


@dataclass(frozen=True)
class BundledDependency:
    """Third-party code vendored in a package, from Provides: bundled(...)."""

    name: str
    version: str = ""

    def __str__(self) -> str:
        if self.version:
            return f"{self.name} = {self.version}"
        return self.name


@dataclass(frozen=True)
class BuildTree:
    """Absolute locations of the rpmbuild directories for one run."""

    output_root: str
    sources_dir: str
    srpm_dir: str
    build_dir: str

    @property
    def buildroot_dir(self) -> str:
        return os.path.join(self.output_root, "BUILDROOT") if self.output_root else ""

    @property
    def rpms_dir(self) -> str:
        return os.path.join(self.output_root, "RPMS") if self.output_root else ""


@dataclass(frozen=True)
class PackageMetadata:
    """Information extracted from an SRPM's spec file."""

    spec_path: str
    tree: BuildTree
    tags: dict[str, list[SpecTag]] = field(default_factory=dict)
    bundled: list[BundledDependency] = field(default_factory=list)

    @property
    def output_root(self) -> str:
        return self.tree.output_root

    @property
    def sources_dir(self) -> str:
        return self.tree.sources_dir

    @property
    def srpm_dir(self) -> str:
        return self.tree.srpm_dir

    @property
    def build_dir(self) -> str:
        return self.tree.build_dir

    @property
    def sources(self) -> list[SpecTag]:
        return self.tags.get("sources", [])

    @property
    def patches(self) -> list[SpecTag]:
        return self.tags.get("patches", [])

    @property
    def requires(self) -> list[SpecTag]:
        return self.tags.get("requires", [])

    @property
    def licenses(self) -> list[str]:
        return self.get_tag_values("license")

    def get_tag_values(self, kind: str) -> list[str]:
        """Return the values recorded for a tag kind, in spec order."""
        return [tag.value for tag in self.tags.get(kind, [])]

    def get_source0(self) -> str:
        return resolve_source0(self.tags)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable report of the metadata."""
        try:
            source0 = self.get_source0()
        except NoSourcesError:
            source0 = None

        return {
            "spec_path": self.spec_path,
            "output_root": self.output_root,
            "sources_dir": self.sources_dir,
            "srpm_dir": self.srpm_dir,
            "build_dir": self.build_dir,
            "source0": source0,
            "tags": {
                kind: [{"name": tag.name, "value": tag.value} for tag in tags]
                for kind, tags in self.tags.items()
            },
            "bundled": [{"name": dep.name, "version": dep.version} for dep in self.bundled],
        }


def resolve_source0(tags: dict[str, list[SpecTag]]) -> str:
    """
    Return the primary source of a package.

    A spec may call its main source Source0, Source, or only number its
    sources from 1. Source0 wins over Source; if neither is present the
    first declared source is used.

    Raises:
        NoSourcesError: If no sources were declared
    """
    sources = tags.get("sources")
    if not sources:
        raise NoSourcesError("no sources")

    for wanted in ("Source0", "Source"):
        for source in sources:
            if source.name == wanted:
                return source.value

    return sources[0].value


def extract_bundled(tags: dict[str, list[SpecTag]]) -> list[BundledDependency]:
    """Collect bundled(name) = version provides, keeping duplicates and order."""
    bundled = []
    for tag in tags.get("provides", []):
        match = BUNDLED_PATTERN.match(tag.value.strip())
        if match:
            bundled.append(
                BundledDependency(name=match.group(1).strip(), version=match.group(2) or "")
            )
    return bundled

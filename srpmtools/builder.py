"""
SRPM pipeline - unpacks a source RPM, extracts its metadata and applies
its patches with rpmbuild.
"""

import logging
import os
from typing import Optional, Union

from srpmtools.analyzer import DEFAULT_TAG_PATTERNS, SpecAnalyzer, TagPattern
from srpmtools.buildtree import BuildTreeManager
from srpmtools.exceptions import BuildToolError, EmptyBuildOutputError, UnpackFailedError
from srpmtools.fetcher import SRPMFetcher
from srpmtools.metadata import BuildTree, PackageMetadata
from srpmtools.runner import CommandRunner, SubprocessRunner, ToolConfig

logger = logging.getLogger(__name__)


def _decode(output: Union[str, bytes, None]) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace").strip()
    return output.strip()


class SRPMUnpacker:
    """Unpacks an SRPM with rpm2cpio | cpio."""

    def __init__(self, runner: Optional[CommandRunner] = None, tools: Optional[ToolConfig] = None):
        self.runner = runner or SubprocessRunner()
        self.tools = tools or ToolConfig()

    def unpack(self, srpm_path: str, dest_dir: str) -> None:
        """
        Extract the contents of srpm_path into dest_dir.

        Raises:
            UnpackFailedError: If rpm2cpio or cpio exit nonzero
        """
        result = self.runner.run([self.tools.rpm2cpio, srpm_path], text=False)
        if result.returncode != 0:
            raise UnpackFailedError(srpm_path, _decode(result.stderr))

        result = self.runner.run(
            [self.tools.cpio, "-idm", "--quiet"], cwd=dest_dir, input=result.stdout, text=False
        )
        if result.returncode != 0:
            raise UnpackFailedError(srpm_path, _decode(result.stderr))

        logger.debug(f"Unpacked {srpm_path} into {dest_dir}")


class PatchApplier:
    """Runs the %prep stage of a spec file with rpmbuild -bp."""

    def __init__(self, runner: Optional[CommandRunner] = None, tools: Optional[ToolConfig] = None):
        self.runner = runner or SubprocessRunner()
        self.tools = tools or ToolConfig()

    def apply_patches(self, metadata: PackageMetadata) -> None:
        """
        Extract the sources and apply patches into metadata.build_dir.

        rpmbuild can exit 0 without preparing anything, so an empty BUILD
        directory afterwards is treated as a failure.

        Raises:
            BuildToolError: If rpmbuild exits nonzero
            EmptyBuildOutputError: If BUILD is empty after rpmbuild
        """
        cmd = [
            self.tools.rpmbuild,
            "-bp",
            "--nodeps",
            "--define",
            f"_topdir {metadata.output_root}",
            metadata.spec_path,
        ]

        logger.info(f"Applying patches: {os.path.basename(metadata.spec_path)}")

        result = self.runner.run(cmd)

        if result.returncode != 0:
            raise BuildToolError(
                f"failed to run rpmbuild (exit {result.returncode}): {_decode(result.stderr)}"
            )

        if BuildTreeManager.is_empty(metadata.build_dir):
            raise EmptyBuildOutputError(metadata.build_dir)

        logger.info(f"Patched sources in {metadata.build_dir}")


class SRPMPipeline:
    """
    Acquires an SRPM and extracts its metadata under one output root.

    Steps run strictly in order:
    1. Recreates SOURCES, SRPMS and BUILD under output_root
    2. Fetches the SRPM into SRPMS
    3. Unpacks it into SOURCES
    4. Locates, normalizes and expands the spec file
    5. Extracts tags and bundled dependencies

    Each pipeline owns its output root; concurrent pipelines need distinct
    roots.
    """

    def __init__(
        self,
        output_root: str,
        runner: Optional[CommandRunner] = None,
        tools: Optional[ToolConfig] = None,
        patterns: tuple[TagPattern, ...] = DEFAULT_TAG_PATTERNS,
        fetcher: Optional[SRPMFetcher] = None,
    ):
        self.output_root = output_root
        self.runner = runner or SubprocessRunner()
        self.tools = tools or ToolConfig()

        self.tree_manager = BuildTreeManager()
        self.fetcher = fetcher or SRPMFetcher()
        self.unpacker = SRPMUnpacker(runner=self.runner, tools=self.tools)
        self.analyzer = SpecAnalyzer(runner=self.runner, tools=self.tools, patterns=patterns)
        self.patch_applier = PatchApplier(runner=self.runner, tools=self.tools)

    def from_url(self, location: str) -> PackageMetadata:
        """
        Fetch an SRPM from a URL or path and extract its metadata.

        Args:
            location: http(s):// URL, file:// URL or local path

        Returns:
            PackageMetadata for the package
        """
        tree = self.tree_manager.prepare(self.output_root)
        srpm_path = self.fetcher.fetch(location, tree.srpm_dir)
        return self._analyze(srpm_path, tree)

    def from_file(self, srpm_path: str) -> PackageMetadata:
        """Extract metadata from a local SRPM file."""
        return self.from_url(os.path.abspath(srpm_path))

    def _analyze(self, srpm_path: str, tree: BuildTree) -> PackageMetadata:
        logger.info(f"Unpacking {os.path.basename(srpm_path)}")
        self.unpacker.unpack(srpm_path, tree.sources_dir)

        metadata = self.analyzer.find_and_analyze(tree)
        logger.info(f"Found spec file: {metadata.spec_path}")
        return metadata

    def apply_patches(self, metadata: PackageMetadata) -> None:
        self.patch_applier.apply_patches(metadata)

    def cleanup(self, metadata: Optional[PackageMetadata] = None) -> None:
        """Remove the build directories, also after a run that failed midway."""
        if metadata is not None:
            tree = metadata.tree
        elif self.output_root:
            tree = self.tree_manager.tree_for(self.output_root)
        else:
            return
        self.tree_manager.cleanup(tree)

"""
Management of the rpmbuild topdir layout (SOURCES, SRPMS, BUILD).
"""

import logging
import os
import shutil

from srpmtools.exceptions import DirectoryCreateError
from srpmtools.metadata import BuildTree

logger = logging.getLogger(__name__)

SOURCES = "SOURCES"
SRPMS = "SRPMS"
BUILD = "BUILD"
BUILDROOT = "BUILDROOT"
RPMS = "RPMS"

DIR_MODE = 0o700


class BuildTreeManager:
    """Creates, validates and removes the directories under an output root."""

    def prepare(self, output_root: str) -> BuildTree:
        """
        Create fresh SOURCES, SRPMS and BUILD directories under output_root.

        Any existing directory is removed first, so calling this again on the
        same root always yields three empty directories.

        Args:
            output_root: Topdir for rpmbuild

        Returns:
            BuildTree with absolute paths

        Raises:
            DirectoryCreateError: If a directory cannot be removed or created
        """
        if not output_root:
            raise DirectoryCreateError("", "no output directory specified")

        tree = self.tree_for(output_root)
        for path in (tree.sources_dir, tree.srpm_dir, tree.build_dir):
            self._create_dir(path)

        return tree

    @staticmethod
    def tree_for(output_root: str) -> BuildTree:
        """Return the BuildTree layout for output_root without touching disk."""
        output_root = os.path.abspath(output_root)
        return BuildTree(
            output_root=output_root,
            sources_dir=os.path.join(output_root, SOURCES),
            srpm_dir=os.path.join(output_root, SRPMS),
            build_dir=os.path.join(output_root, BUILD),
        )

    def _create_dir(self, path: str) -> None:
        try:
            if os.path.lexists(path):
                if os.path.isdir(path) and not os.path.islink(path):
                    shutil.rmtree(path)
                else:
                    os.remove(path)
            os.makedirs(path, mode=DIR_MODE)
        except OSError as e:
            raise DirectoryCreateError(path, str(e))

        logger.debug(f"Created directory: {path}")

    def cleanup(self, tree: BuildTree) -> None:
        """Best-effort removal of every directory rpmbuild may have touched."""
        for path in (
            tree.sources_dir,
            tree.srpm_dir,
            tree.build_dir,
            tree.buildroot_dir,
            tree.rpms_dir,
        ):
            if not path:
                continue
            try:
                shutil.rmtree(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.debug(f"Could not remove {path}: {e}")

    @staticmethod
    def is_empty(path: str) -> bool:
        """Return True if path has no entries, does not exist or cannot be listed."""
        try:
            with os.scandir(path) as entries:
                return next(entries, None) is None
        except OSError:
            return True

"""
Spec file analyzer: finds the spec in an unpacked SRPM, prepares it for
rpmspec and extracts tags from the macro-expanded output.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from srpmtools.exceptions import NormalizeError, SpecNotFoundError
from srpmtools.metadata import BuildTree, PackageMetadata, SpecTag, extract_bundled
from srpmtools.runner import CommandRunner, SubprocessRunner, ToolConfig

logger = logging.getLogger(__name__)

SPEC_EXTENSION = ".spec"
NAME_DIRECTIVE = "Name:"
MACRO_OVERRIDE_PREFIX = "%__"


@dataclass(frozen=True)
class TagPattern:
    """
    A named line pattern.

    With one capture group the tag name is the pattern name. With two, the
    first group is the directive token (Source1, Patch3) and becomes the tag
    name.
    """

    name: str
    regex: re.Pattern

    @property
    def indexed(self) -> bool:
        return self.regex.groups == 2


def _pattern(name: str, regex: str) -> TagPattern:
    return TagPattern(name=name, regex=re.compile(regex))


DEFAULT_TAG_PATTERNS: tuple[TagPattern, ...] = (
    _pattern("name", r"^Name\s*:\s*(\S+)"),
    _pattern("version", r"^Version\s*:\s*(\S+)"),
    _pattern("epoch", r"^Epoch\s*:\s*(\S+)"),
    _pattern("release", r"^Release\s*:\s*(\S+)"),
    _pattern("summary", r"^Summary\s*:\s*(.+)"),
    _pattern("license", r"^License\s*:\s*(.+)"),
    _pattern("url", r"^URL\s*:\s*(\S+)"),
    _pattern("buildroot", r"^BuildRoot\s*:\s*(\S+)"),
    _pattern("buildarch", r"^BuildArch\s*:\s*(\S+)"),
    _pattern("buildRequires", r"^BuildRequires\s*:\s*(.+)"),
    _pattern("sources", r"^(Source\d*)\s*:\s*(.+)"),
    _pattern("patches", r"^(Patch\d*)\s*:\s*(\S+)"),
    _pattern("requires", r"^Requires\s*:\s*(.+)"),
    _pattern("conflicts", r"^Conflicts\s*:\s*(.+)"),
    _pattern("obsoletes", r"^Obsoletes\s*:\s*(.+)"),
    _pattern("provides", r"^Provides\s*:\s*(.+)"),
    _pattern("packages", r"^%package\s+(\S+)"),
)


class TagExtractor:
    """Scans macro-expanded spec text line by line against a pattern table."""

    def __init__(self, patterns: tuple[TagPattern, ...] = DEFAULT_TAG_PATTERNS):
        self.patterns = tuple(patterns)

    def extract(self, text: str) -> dict[str, list[SpecTag]]:
        """
        Extract tags from spec text.

        Every pattern is tried on every line, so a line may produce more
        than one tag. Values are stripped of trailing whitespace.

        Args:
            text: Output of rpmspec -P

        Returns:
            Mapping of tag kind to tags in the order they appear
        """
        tags: dict[str, list[SpecTag]] = {}
        if not text:
            return tags

        for line in text.split("\n"):
            for pattern in self.patterns:
                match = pattern.regex.match(line)
                if not match:
                    continue
                if pattern.indexed:
                    tag = SpecTag(name=match.group(1), value=match.group(2).rstrip())
                else:
                    tag = SpecTag(name=pattern.name, value=match.group(1).rstrip())
                tags.setdefault(pattern.name, []).append(tag)

        return tags


def locate_spec(directory: str) -> str:
    """
    Find the spec file among the immediate entries of directory.

    When several .spec files are present the lexicographically first one is
    returned.

    Raises:
        SpecNotFoundError: If no spec file is present or directory is unreadable
    """
    try:
        names = os.listdir(directory)
    except OSError:
        raise SpecNotFoundError(f"Cannot scan dir for specfile: {directory}")

    candidates = sorted(n for n in names if os.path.splitext(n)[1] == SPEC_EXTENSION)
    if not candidates:
        raise SpecNotFoundError(f"specfile not found in {directory}")

    if len(candidates) > 1:
        logger.warning(f"Multiple spec files in {directory}: {candidates}, using {candidates[0]}")

    return os.path.join(directory, candidates[0])


def normalize_spec(spec_path: str) -> bool:
    """
    Comment out macro overrides (%__foo) that precede the Name: line.

    Some specs redefine internal rpm macros at the top of the file, which
    makes rpmspec -P fail. Everything after Name: is left alone.

    Returns:
        True if the file was rewritten

    Raises:
        NormalizeError: If the file cannot be read or written
    """
    try:
        with open(spec_path, encoding="utf-8", errors="surrogateescape", newline="") as f:
            content = f.read()
    except OSError as e:
        raise NormalizeError(f"failed to open file {spec_path}: {e}")

    lines = content.split("\n")
    changed = False

    for i, line in enumerate(lines):
        if line.startswith(NAME_DIRECTIVE):
            break
        if line.startswith(MACRO_OVERRIDE_PREFIX):
            lines[i] = "#" + line
            changed = True

    if not changed:
        return False

    try:
        with open(spec_path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
            f.write("\n".join(lines))
    except OSError as e:
        raise NormalizeError(f"failed to write back file {spec_path}: {e}")

    logger.debug(f"Commented out macro overrides in {spec_path}")
    return True


def expand_spec(
    spec_path: str,
    runner: Optional[CommandRunner] = None,
    tools: Optional[ToolConfig] = None,
) -> str:
    """
    Run rpmspec -P on a spec file and return the expanded text.

    rpmspec frequently exits nonzero on specs that still expand fine, so a
    failure is only logged and whatever was printed is returned.
    """
    runner = runner or SubprocessRunner()
    tools = tools or ToolConfig()

    result = runner.run([tools.rpmspec, "-P", spec_path])

    if result.returncode != 0:
        logger.warning(
            f"Ignoring rpmspec exit status {result.returncode} for {spec_path}: "
            f"{(result.stderr or '').strip()}"
        )

    return result.stdout or ""


class SpecAnalyzer:
    """Turns a spec file inside a prepared build tree into PackageMetadata."""

    def __init__(
        self,
        runner: Optional[CommandRunner] = None,
        tools: Optional[ToolConfig] = None,
        patterns: tuple[TagPattern, ...] = DEFAULT_TAG_PATTERNS,
    ):
        self.runner = runner or SubprocessRunner()
        self.tools = tools or ToolConfig()
        self.extractor = TagExtractor(patterns)

    def analyze_spec(self, spec_path: str, tree: BuildTree) -> PackageMetadata:
        """
        Parse a spec file and extract package information.

        Args:
            spec_path: Path to the .spec file
            tree: Build directories the package belongs to

        Returns:
            PackageMetadata with extracted tags and bundled dependencies

        Raises:
            NormalizeError: If the spec file cannot be read or written
        """
        spec_path = os.path.abspath(spec_path)
        normalize_spec(spec_path)

        text = expand_spec(spec_path, self.runner, self.tools)
        tags = self.extractor.extract(text)
        logger.debug(f"Extracted {sum(len(v) for v in tags.values())} tags from {spec_path}")

        return PackageMetadata(
            spec_path=spec_path,
            tree=tree,
            tags=tags,
            bundled=extract_bundled(tags),
        )

    def find_and_analyze(self, tree: BuildTree) -> PackageMetadata:
        """Locate the spec file in the tree's SOURCES directory and analyze it."""
        spec_path = locate_spec(tree.sources_dir)
        return self.analyze_spec(spec_path, tree)

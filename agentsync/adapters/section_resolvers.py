"""Section resolvers: where named prompt fragments are read from."""

from pathlib import Path

SECTION_SUFFIXES = (".txt", ".md")


class SectionResolver:
    """Protocol for looking up prompt section text by id."""

    def resolve(self, section_id: str) -> str | None:
        """Return the section text, or None when the section does not exist."""
        raise NotImplementedError


class MappingSectionResolver(SectionResolver):
    """Serves sections from an in-memory mapping."""

    def __init__(self, sections: dict[str, str] | None = None) -> None:
        self.sections: dict[str, str] = dict(sections or {})

    def resolve(self, section_id: str) -> str | None:
        return self.sections.get(section_id)


class DirectorySectionResolver(SectionResolver):
    """Reads ``<root>/<section_id>.txt`` (or ``.md``).

    Section ids may name nested folders (``support/escalation``). Ids that
    would escape the root directory resolve to nothing.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def _candidate_paths(self, section_id: str) -> list[Path]:
        candidates = []
        for suffix in SECTION_SUFFIXES:
            path = (self.root / f"{section_id}{suffix}").resolve()
            if path.is_relative_to(self.root):
                candidates.append(path)
        return candidates

    def resolve(self, section_id: str) -> str | None:
        for path in self._candidate_paths(section_id):
            if path.is_file():
                # only the file's final newline is dropped; it would double up
                # with the section separator. Further blank lines are content.
                return path.read_text(encoding="utf-8").removesuffix("\n")
        return None

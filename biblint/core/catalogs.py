"""Static BibTeX catalogs.

Recognized entry types, recognized field names and the per-type field
requirement table. The validator checks documents against these tables and
completion or tooltip front ends read the same data, so suggestions and
diagnostics never disagree. Everything here is read-only.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

ENTRY_TYPES: Tuple[str, ...] = (
    "article",
    "book",
    "booklet",
    "conference",
    "inbook",
    "incollection",
    "inproceedings",
    "manual",
    "mastersthesis",
    "misc",
    "online",
    "phdthesis",
    "proceedings",
    "techreport",
    "unpublished",
    "webpage",
)

FIELD_NAMES: Tuple[str, ...] = (
    # Required/common fields
    "author",
    "title",
    "journal",
    "year",
    "publisher",
    "booktitle",
    "editor",
    "pages",
    "volume",
    "number",
    "series",
    "edition",
    "month",
    "note",
    "key",
    # Optional fields
    "address",
    "annote",
    "chapter",
    "crossref",
    "doi",
    "eprint",
    "howpublished",
    "institution",
    "isbn",
    "issn",
    "keywords",
    "language",
    "organization",
    "school",
    "type",
    "url",
    "urldate",
    "abstract",
    # Modern fields
    "archiveprefix",
    "primaryclass",
    "eid",
    "numpages",
)

MONTH_ABBREVIATIONS: Tuple[str, ...] = (
    "jan", "feb", "mar", "apr", "may", "jun",
    "jul", "aug", "sep", "oct", "nov", "dec",
)

# Common journal abbreviations offered for the journal field
JOURNAL_ABBREVIATIONS: Tuple[str, ...] = (
    "Nature",
    "Science",
    "Cell",
    "PNAS",
    "J. Am. Chem. Soc.",
    "Phys. Rev. Lett.",
    "IEEE Trans.",
    "ACM Trans.",
    "Commun. ACM",
)

_ENTRY_TYPE_SET = frozenset(ENTRY_TYPES)
_FIELD_NAME_SET = frozenset(FIELD_NAMES)


@dataclass(frozen=True)
class FieldRequirement:
    """Required and optional fields of an entry type, in declared order."""
    required: Tuple[str, ...]
    optional: Tuple[str, ...]


FIELD_REQUIREMENTS: Mapping[str, FieldRequirement] = MappingProxyType({
    "article": FieldRequirement(
        required=("author", "title", "journal", "year"),
        optional=("volume", "number", "pages", "month", "note", "doi", "url", "editor"),
    ),
    "book": FieldRequirement(
        required=("author", "title", "publisher", "year"),
        optional=("volume", "series", "address", "edition", "month", "note", "isbn", "editor"),
    ),
    "inproceedings": FieldRequirement(
        required=("author", "title", "booktitle", "year"),
        optional=("editor", "pages", "organization", "publisher", "address", "month", "note"),
    ),
    "incollection": FieldRequirement(
        required=("author", "title", "booktitle", "publisher", "year"),
        optional=("editor", "pages", "chapter", "address", "month", "note"),
    ),
    "conference": FieldRequirement(
        required=("author", "title", "booktitle", "year"),
        optional=("editor", "pages", "organization", "publisher", "address", "month", "note"),
    ),
    "phdthesis": FieldRequirement(
        required=("author", "title", "school", "year"),
        optional=("address", "month", "note", "type"),
    ),
    "mastersthesis": FieldRequirement(
        required=("author", "title", "school", "year"),
        optional=("address", "month", "note", "type"),
    ),
    "techreport": FieldRequirement(
        required=("author", "title", "institution", "year"),
        optional=("type", "number", "address", "month", "note"),
    ),
    "manual": FieldRequirement(
        required=("title",),
        optional=("author", "organization", "address", "edition", "month", "year", "note"),
    ),
    "misc": FieldRequirement(
        required=("title",),
        optional=("author", "howpublished", "month", "year", "note", "url"),
    ),
    "online": FieldRequirement(
        required=("title", "url"),
        optional=("author", "year", "month", "urldate", "note"),
    ),
    "unpublished": FieldRequirement(
        required=("author", "title", "note"),
        optional=("month", "year"),
    ),
    "booklet": FieldRequirement(
        required=("title",),
        optional=("author", "howpublished", "address", "month", "year", "note"),
    ),
    "proceedings": FieldRequirement(
        required=("title", "year"),
        optional=("editor", "publisher", "organization", "address", "month", "note"),
    ),
})


@dataclass(frozen=True)
class EntryTypeInfo:
    """Tooltip data for an entry type."""
    name: str
    description: str
    example: Optional[str] = None

    @property
    def requirement(self) -> Optional[FieldRequirement]:
        return FIELD_REQUIREMENTS.get(self.name)


@dataclass(frozen=True)
class FieldInfo:
    """Tooltip data for a field name."""
    name: str
    description: str
    example: Optional[str] = None
    note: Optional[str] = None


def _entry_info(name, description, example=None):
    return name, EntryTypeInfo(name=name, description=description, example=example)


def _field_info(name, description, example=None, note=None):
    return name, FieldInfo(name=name, description=description, example=example, note=note)


ENTRY_TYPE_INFO: Mapping[str, EntryTypeInfo] = MappingProxyType(dict([
    _entry_info(
        "article", "An article published in a journal or magazine.",
        "@article{key,\n  author = {John Doe},\n  title = {Sample Article},\n"
        "  journal = {Journal Name},\n  year = {2023}\n}",
    ),
    _entry_info(
        "book", "A complete book published by a publisher.",
        "@book{key,\n  author = {Jane Smith},\n  title = {Book Title},\n"
        "  publisher = {Publisher},\n  year = {2023}\n}",
    ),
    _entry_info(
        "inproceedings", "A paper published in conference proceedings.",
        "@inproceedings{key,\n  author = {Author Name},\n  title = {Paper Title},\n"
        "  booktitle = {Conference Proceedings},\n  year = {2023}\n}",
    ),
    _entry_info("incollection", "A part of a book with its own title."),
    _entry_info("conference", "Same as inproceedings - a paper in conference proceedings."),
    _entry_info("phdthesis", "A doctoral dissertation."),
    _entry_info("mastersthesis", "A master's thesis."),
    _entry_info("techreport", "A technical report published by an institution."),
    _entry_info("manual", "Technical documentation or manual."),
    _entry_info("misc", "For items that don't fit other categories."),
    _entry_info("online", "An online resource or webpage."),
    _entry_info("unpublished", "A document that has not been published."),
    _entry_info("booklet", "A printed work without a named publisher."),
    _entry_info("proceedings", "The proceedings of a conference."),
    _entry_info("inbook", "Part of a book with its own title."),
    _entry_info("webpage", "A web page (alias for online)."),
]))

FIELD_INFO: Mapping[str, FieldInfo] = MappingProxyType(dict([
    _field_info(
        "author", "The name(s) of the author(s).", "John Doe and Jane Smith",
        note='Use "and" to separate multiple authors',
    ),
    _field_info("title", "The title of the work.", "A Great Discovery in Science"),
    _field_info("journal", "The name of the journal or magazine.", "Nature"),
    _field_info("year", "The year of publication.", "2023"),
    _field_info("publisher", "The name of the publisher.", "Academic Press"),
    _field_info(
        "booktitle", "The title of the book or conference proceedings.",
        "Proceedings of the International Conference",
    ),
    _field_info(
        "editor", "The name(s) of the editor(s).", "John Editor and Jane Editor",
        note='Use "and" to separate multiple editors',
    ),
    _field_info(
        "pages", "The page numbers.", "123--145",
        note="Use double dash (--) for page ranges",
    ),
    _field_info("volume", "The volume number of a journal or book.", "42"),
    _field_info("number", "The issue number of a journal.", "3"),
    _field_info(
        "month", "The month of publication.", "jan",
        note="Use three-letter abbreviations without quotes",
    ),
    _field_info("note", "Any additional information.", "In press"),
    _field_info("doi", "Digital Object Identifier.", "10.1000/182"),
    _field_info("url", "The URL of an online resource.", "https://example.com/paper.pdf"),
    _field_info("urldate", "The date when the URL was last accessed.", "2023-12-01"),
    _field_info("address", "The address of the publisher or institution.", "New York, NY"),
    _field_info("edition", "The edition of a book.", "2nd"),
    _field_info(
        "series", "The name of a series or set of books.", "Lecture Notes in Computer Science"
    ),
    _field_info("school", "The name of the school where a thesis was written.", "MIT"),
    _field_info(
        "institution", "The institution that published a technical report.", "Stanford University"
    ),
    _field_info("organization", "The organization that sponsored a conference.", "IEEE"),
    _field_info("type", "The type of technical report or thesis.", "PhD thesis"),
    _field_info("howpublished", "How something unusual has been published.", "Self-published"),
    _field_info("chapter", "The chapter number.", "7"),
    _field_info("key", "Used for alphabetizing when author is missing.", "Anonymous99"),
    _field_info("crossref", "The key of another entry to inherit fields from.", "conf2023"),
    _field_info("isbn", "International Standard Book Number.", "978-0-123456-78-9"),
    _field_info("issn", "International Standard Serial Number.", "1234-5678"),
    _field_info(
        "keywords", "Keywords associated with the entry.",
        "machine learning, artificial intelligence",
    ),
    _field_info("abstract", "Abstract or summary of the work.", "This paper presents..."),
]))


def is_entry_type(name: str) -> bool:
    """Check whether ``name`` is a recognized entry type (case-insensitive)."""
    return name.lower() in _ENTRY_TYPE_SET


def is_field_name(name: str) -> bool:
    """Check whether ``name`` is a recognized field name (case-insensitive)."""
    return name.lower() in _FIELD_NAME_SET


def requirements_for(entry_type: str) -> Optional[FieldRequirement]:
    return FIELD_REQUIREMENTS.get(entry_type.lower())


def field_status(entry_type: Optional[str], field_name: str) -> str:
    """Classify a field for an entry type.

    Returns:
        "required", "optional" or "unknown". Without a known entry type the
        answer is "unknown".
    """
    requirement = requirements_for(entry_type) if entry_type else None
    if requirement is None:
        return "unknown"
    name = field_name.lower()
    if name in requirement.required:
        return "required"
    if name in requirement.optional:
        return "optional"
    return "unknown"


def suggest_fields(entry_type: Optional[str]) -> List[str]:
    """Order field names for suggestion: required, optional, then the rest."""
    requirement = requirements_for(entry_type) if entry_type else None
    ordered: List[str] = []
    if requirement is not None:
        ordered.extend(requirement.required)
        ordered.extend(name for name in requirement.optional if name not in ordered)
    ordered.extend(name for name in FIELD_NAMES if name not in ordered)
    return ordered


_VALUE_CANDIDATES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "month": MONTH_ABBREVIATIONS,
    "journal": JOURNAL_ABBREVIATIONS,
})


def suggest_values(field_name: str, prefix: str = "") -> List[str]:
    """Suggest values for a field.

    Month fields get the month abbreviations and journal fields the common
    journal abbreviations; other fields get nothing.

    Args:
        field_name: Field whose value is being written (case-insensitive)
        prefix: Text already typed; candidates must start with it, ignoring case

    Returns:
        Matching candidates in catalog order
    """
    candidates = _VALUE_CANDIDATES.get(field_name.lower(), ())
    prefix = prefix.lower()
    return [value for value in candidates if value.lower().startswith(prefix)]

"""Profile normalizer: project a raw EPS document onto flat enrichment keys.

Responsibilities of this stage:
- walk the loosely typed EPS document defensively
- produce one ``FieldValue`` per enrichment key that has usable data
- never raise: absent, empty or wrongly typed substructure means "no data"

Duplicate social entries follow a first-match rule: the first ``twitter`` and
the first ``github`` entry in ``rawData.profiles`` win, later ones are ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Final

from crmenrich.domain.model import EpsProfile

from .contracts import FieldValue, NormalizedProfile

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

_SKILLS_PREVIEW: Final[int] = 5
_NOT_AVAILABLE: Final[str] = "N/A"

type Document = Mapping[str, Any]
type Extractor = Callable[[Document, Document], FieldValue | None]


def normalize_profile(profile: object) -> NormalizedProfile:
    """Return the normalized projection of an EPS profile or raw document."""

    document = _document_of(profile)
    raw_data = _mapping(document.get("rawData")) or {}

    fields: dict[str, FieldValue] = {}
    for key, extractor in _EXTRACTORS:
        extracted = extractor(document, raw_data)
        if extracted is not None:
            fields[key] = extracted

    profile_id = _profile_id(profile, document)
    log.debug("Normalized EPS profile %s: %s", profile_id, ", ".join(fields) or "no fields")
    return NormalizedProfile(profile_id=profile_id, fields=fields)


# Document access -------------------------------------------------------------


def _document_of(profile: object) -> Document:
    if isinstance(profile, EpsProfile):
        return _mapping(profile.document) or {}
    return _mapping(profile) or {}


def _profile_id(profile: object, document: Document) -> str | None:
    if isinstance(profile, EpsProfile):
        return profile.id
    raw_id = document.get("id")
    if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool):
        return _text(str(raw_id))
    return None


def _mapping(value: object) -> Document | None:
    if isinstance(value, Mapping):
        return value  # pyright: ignore[reportUnknownVariableType]
    return None


def _sequence(value: object) -> list[Any] | None:
    """Return a non-empty list for list/tuple input, ``None`` for anything else."""

    if isinstance(value, (list, tuple)) and value:
        return list(value)  # pyright: ignore[reportUnknownArgumentType]
    return None


def _text(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _records(value: object) -> list[Document]:
    return [entry for entry in _sequence(value) or () if isinstance(entry, Mapping)]


def _named_strings(value: object, *name_keys: str) -> list[str]:
    """Collect strings, or the first usable name key of record entries."""

    names: list[str] = []
    for entry in _sequence(value) or ():
        name = _text(entry)
        if name is None and isinstance(entry, Mapping):
            name = next(
                (text for key in name_keys if (text := _text(entry.get(key))) is not None),
                None,
            )
        if name is not None:
            names.append(name)
    return names


def _unique_casefolded(values: list[str]) -> list[str]:
    seen: set[str] = set()
    unique: list[str] = []
    for value in values:
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        unique.append(value)
    return unique


def _count_label(count: int, noun: str, plural: str | None = None) -> str:
    word = noun if count == 1 else (plural or f"{noun}s")
    return f"{count} {word}"


def _scalar(text: str | None) -> FieldValue | None:
    if text is None:
        return None
    return FieldValue(value=text, display_value=text)


def _counted(values: list[Any], noun: str, plural: str | None = None) -> FieldValue | None:
    if not values:
        return None
    return FieldValue(value=values, display_value=_count_label(len(values), noun, plural))


# Top-level fields -------------------------------------------------------------


def _top_level_text(key: str) -> Extractor:
    def extract(document: Document, _raw_data: Document) -> FieldValue | None:
        return _scalar(_text(document.get(key)))

    return extract


def _linkedin_url(document: Document, _raw_data: Document) -> FieldValue | None:
    url = _text(document.get("linkedinUrl"))
    if url is None:
        return None
    if not url.lower().startswith(("http://", "https://")):
        url = f"https://{url}"
    return FieldValue(value=url, display_value=url)


def _skills(document: Document, _raw_data: Document) -> FieldValue | None:
    skills = _unique_casefolded(_named_strings(document.get("skills"), "name"))
    if not skills:
        return None
    display = ", ".join(skills[:_SKILLS_PREVIEW])
    if len(skills) > _SKILLS_PREVIEW:
        display += f" + {len(skills) - _SKILLS_PREVIEW} more"
    return FieldValue(value=skills, display_value=display)


# rawData fields -------------------------------------------------------------------


def _education(_document: Document, raw_data: Document) -> FieldValue | None:
    records = _records(raw_data.get("education"))
    if not records:
        return None
    first = records[0]
    school = _text((_mapping(first.get("school")) or {}).get("name")) or _NOT_AVAILABLE
    degree = _text(first.get("degree_name"))
    if degree is None:
        degrees = _named_strings(first.get("degrees"), "name")
        degree = degrees[0] if degrees else _NOT_AVAILABLE
    return FieldValue(value=[dict(record) for record in records], display_value=f"{school} - {degree}")


def _experience(_document: Document, raw_data: Document) -> FieldValue | None:
    records = [dict(record) for record in _records(raw_data.get("experience"))]
    return _counted(records, "position")


def _string_list_field(source_key: str, noun: str, *name_keys: str) -> Extractor:
    def extract(_document: Document, raw_data: Document) -> FieldValue | None:
        return _counted(_named_strings(raw_data.get(source_key), *name_keys), noun)

    return extract


def _network_entries(raw_data: Document) -> list[tuple[str, Document]]:
    entries: list[tuple[str, Document]] = []
    for record in _records(raw_data.get("profiles")):
        network = _text(record.get("network"))
        if network is not None:
            entries.append((network.casefold(), record))
    return entries


def _first_network(raw_data: Document, network: str) -> Document | None:
    return next((record for name, record in _network_entries(raw_data) if name == network), None)


def _social_profiles(_document: Document, raw_data: Document) -> FieldValue | None:
    profiles: list[dict[str, str]] = []
    for network, record in _network_entries(raw_data):
        entry = {"network": network}
        for key in ("url", "username"):
            text = _text(record.get(key))
            if text is not None:
                entry[key] = text
        profiles.append(entry)
    return _counted(profiles, "profile")


def _websites(_document: Document, raw_data: Document) -> FieldValue | None:
    urls = [
        url
        for network, record in _network_entries(raw_data)
        if network == "website" and (url := _text(record.get("url"))) is not None
    ]
    return _counted(urls, "website")


def _github_url(_document: Document, raw_data: Document) -> FieldValue | None:
    record = _first_network(raw_data, "github")
    if record is None:
        return None
    url = _text(record.get("url"))
    if url is None:
        username = _text(record.get("username"))
        url = f"https://github.com/{username}" if username else None
    return _scalar(url)


def _twitter_handle(_document: Document, raw_data: Document) -> FieldValue | None:
    record = _first_network(raw_data, "twitter")
    if record is None:
        return None
    username = _text(record.get("username"))
    if username is None:
        url = _text(record.get("url"))
        username = url.rstrip("/").rsplit("/", 1)[-1] if url else None
    username = username.lstrip("@") if username else None
    return _scalar(f"@{username}" if username else None)


def _emails_of_type(email_type: str) -> Extractor:
    def extract(_document: Document, raw_data: Document) -> FieldValue | None:
        addresses = [
            address
            for record in _records(raw_data.get("emails"))
            if (_text(record.get("type")) or "").casefold() == email_type
            and (address := _text(record.get("address"))) is not None
        ]
        return _counted(addresses, f"{email_type} email")

    return extract


def _company_info(_document: Document, raw_data: Document) -> FieldValue | None:
    experience = _sequence(raw_data.get("experience"))
    first = _mapping(experience[0]) if experience else None
    company = _mapping(first.get("company")) if first is not None else None
    if company is None:
        return None
    name = _text(company.get("name"))
    if name is None:
        return None
    info: dict[str, Any] = {
        key: value
        for key, value in company.items()
        if isinstance(key, str) and isinstance(value, (str, int, float, bool))
    }
    info["name"] = name
    industry = _text(company.get("industry"))
    return FieldValue(value=info, display_value=f"{name} - {industry}" if industry else name)


_EXTRACTORS: Final[tuple[tuple[str, Extractor], ...]] = (
    ("phone", _top_level_text("phone")),
    ("email", _top_level_text("email")),
    ("jobTitle", _top_level_text("jobTitle")),
    ("linkedinUrl", _linkedin_url),
    ("companyName", _top_level_text("companyName")),
    ("skills", _skills),
    ("location", _top_level_text("location")),
    ("industry", _top_level_text("industry")),
    ("experience", _experience),
    ("education", _education),
    ("languages", _string_list_field("languages", "language", "name")),
    ("certifications", _string_list_field("certifications", "certification", "name")),
    ("interests", _string_list_field("interests", "interest")),
    ("socialProfiles", _social_profiles),
    ("websites", _websites),
    ("githubUrl", _github_url),
    ("twitterHandle", _twitter_handle),
    ("personalEmails", _emails_of_type("personal")),
    ("workEmails", _emails_of_type("work")),
    ("phoneNumbers", _string_list_field("phone_numbers", "number", "number")),
    ("companyInfo", _company_info),
)

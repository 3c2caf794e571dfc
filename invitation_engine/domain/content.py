# invitation_engine/domain/content.py
from invitation_engine.domain.descriptor import ElementKind, PartyData, TemplateElement
from invitation_engine.domain.locales import get_locale


def resolve_content(element: TemplateElement, party: PartyData, locale: str) -> str:
    """Literal text drawn for ``element``. An empty string means the element is not drawn at all.

    Only the dynamic value is returned; labels such as "Location:" are part of
    the background artwork.
    """
    grammar = get_locale(locale)
    kind = element.kind

    if kind is ElementKind.CHILD_NAME:
        return grammar.possessive(party.child_name) if party.child_name else ""
    if kind is ElementKind.CHILD_AGE:
        return grammar.ordinal(party.child_age)
    if kind is ElementKind.DATE_TIME:
        return grammar.compact_datetime(party.event_start)
    if kind is ElementKind.DATE:
        return grammar.date(party.event_start)
    if kind is ElementKind.TIME:
        return grammar.time_range(party.event_start, party.event_end)
    if kind is ElementKind.LOCATION:
        return party.location or ""
    if kind is ElementKind.NOTES:
        return party.notes or ""
    if kind is ElementKind.THEME:
        return party.theme or ""
    return element.content or ""

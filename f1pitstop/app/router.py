"""
Query-parameter routing for the Streamlit dashboard.

Pages are addressed as ``?page=<name>&<param>=<value>``; the mapping from
parameters to a page is kept free of Streamlit so it can be tested directly.
"""
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional
from urllib.parse import urlencode


DEFAULT_PAGE = "results"


@dataclass(frozen=True)
class PageSpec:
    name: str
    title: str
    required: tuple[str, ...] = ()
    optional: tuple[str, ...] = ()
    fallback: Optional[str] = None  # page to show when a required param is missing
    nav_parent: Optional[str] = None


PAGES: dict[str, PageSpec] = {
    "results": PageSpec("results", "Results", optional=("session_key",)),
    "drivers": PageSpec("drivers", "Drivers", optional=("search",)),
    "driver": PageSpec("driver", "Driver Profile", required=("driver_number",),
                       optional=("session_key",), fallback="drivers", nav_parent="drivers"),
    "events": PageSpec("events", "Events", optional=("year",)),
    "event": PageSpec("event", "Event Details", required=("meeting_key",),
                      optional=("year",), fallback="events", nav_parent="events"),
}

# (page, label, icon) in bottom-bar order
NAV_ITEMS: list[tuple[str, str, str]] = [
    ("results", "Results", "🏆"),
    ("drivers", "Drivers", "👥"),
    ("events", "Events", "📅"),
]


@dataclass(frozen=True)
class Route:
    page: str
    params: dict[str, str] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.params.get(name, default)


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_route(query_params: Mapping[str, Any]) -> Route:
    """
    Map query parameters to a page.

    Unknown pages resolve to the results page; detail pages missing
    their key resolve to their list page.
    """
    page = _first(query_params.get("page")) or DEFAULT_PAGE
    spec = PAGES.get(page, PAGES[DEFAULT_PAGE])

    values = {name: _first(query_params.get(name)) for name in spec.required + spec.optional}
    if any(values.get(name) is None for name in spec.required):
        return resolve_route({k: v for k, v in query_params.items() if k != "page"} | {"page": spec.fallback})

    return Route(spec.name, {k: v for k, v in values.items() if v is not None})


def build_link(page: str, **params: Any) -> str:
    """Relative link to a page, e.g. ``?page=driver&driver_number=44``."""
    if page not in PAGES:
        raise ValueError(f"Unknown page '{page}'. Choose from {list(PAGES)}.")
    query = {"page": page, **{k: v for k, v in params.items() if v is not None}}
    return f"?{urlencode(query)}"


def active_nav(route: Route) -> str:
    """Bottom-bar entry highlighted for a route."""
    return PAGES[route.page].nav_parent or route.page

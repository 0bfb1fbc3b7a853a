"""Governance data: the Rust teams, their pages and their subteams."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

import httpx

from wwwsite.cache import Cache

BASE_URL = "https://team-api.infra.rust-lang.org/v1"
ZULIP_DOMAIN = "https://rust-lang.zulipchat.com"
LAUNCHING_PAD = "launching-pad"


class TeamKind(enum.Enum):
    """The kind of a group in the team data."""

    TEAM = "team"
    WORKING_GROUP = "working_group"
    PROJECT_GROUP = "project_group"
    MARKER_TEAM = "marker_team"

    @classmethod
    def _missing_(cls, value: object) -> TeamKind | None:
        if isinstance(value, str):
            normalized = value.replace("-", "_").lower()
            for member in cls:
                if member.value == normalized:
                    return member
        return None


@dataclass
class TeamMember:
    name: str
    github: str
    github_id: int
    is_lead: bool = False
    roles: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TeamMember:
        return cls(
            name=data["name"],
            github=data["github"],
            github_id=data["github_id"],
            is_lead=data.get("is_lead", False),
            roles=list(data.get("roles") or []),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "github": self.github,
            "github_id": self.github_id,
            "is_lead": self.is_lead,
            "roles": list(self.roles),
        }


@dataclass
class TeamWebsite:
    name: str
    description: str
    page: str
    email: str | None = None
    repo: str | None = None
    discord: Any = None
    zulip_stream: str | None = None
    weight: int = 0
    matrix_room: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> TeamWebsite:
        return cls(
            name=data["name"],
            description=data["description"],
            page=data["page"],
            email=data.get("email"),
            repo=data.get("repo"),
            discord=data.get("discord"),
            zulip_stream=data.get("zulip_stream"),
            weight=data.get("weight", 0),
            matrix_room=data.get("matrix_room"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "page": self.page,
            "email": self.email,
            "repo": self.repo,
            "discord": self.discord,
            "zulip_stream": self.zulip_stream,
            "weight": self.weight,
            "matrix_room": self.matrix_room,
        }


@dataclass
class Team:
    """A team, working group or project group with its members."""

    name: str
    kind: TeamKind = TeamKind.TEAM
    subteam_of: str | None = None
    members: list[TeamMember] = field(default_factory=list)
    alumni: list[TeamMember] = field(default_factory=list)
    website_data: TeamWebsite | None = None
    roles: list[dict[str, Any]] = field(default_factory=list)
    github: Any = None
    discord: list[Any] = field(default_factory=list)
    top_level: bool | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Team:
        website = data.get("website_data")
        return cls(
            name=data["name"],
            kind=TeamKind(data["kind"]),
            subteam_of=data.get("subteam_of"),
            members=[TeamMember.from_json(m) for m in data.get("members") or []],
            alumni=[TeamMember.from_json(m) for m in data.get("alumni") or []],
            website_data=TeamWebsite.from_json(website) if website is not None else None,
            roles=[dict(role) for role in data.get("roles") or []],
            github=data.get("github"),
            discord=list(data.get("discord") or []),
            top_level=data.get("top_level"),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "subteam_of": self.subteam_of,
            "members": [m.to_json() for m in self.members],
            "alumni": [m.to_json() for m in self.alumni],
            "website_data": self.website_data.to_json() if self.website_data else None,
            "roles": [dict(role) for role in self.roles],
            "github": self.github,
            "discord": list(self.discord),
            "top_level": self.top_level,
        }

    @property
    def weight(self) -> int:
        return self.website_data.weight if self.website_data else 0


@dataclass
class IndexTeam:
    team: Team
    url: str

    def to_json(self) -> dict[str, Any]:
        return {**self.team.to_json(), "url": self.url}


@dataclass
class IndexData:
    teams: list[IndexTeam] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {"teams": [t.to_json() for t in self.teams]}


@dataclass
class PageData:
    team: Team
    subteams: list[Team] = field(default_factory=list)
    wgs: list[Team] = field(default_factory=list)
    project_groups: list[Team] = field(default_factory=list)
    zulip_domain: str = ZULIP_DOMAIN

    def to_json(self) -> dict[str, Any]:
        return {
            "team": self.team.to_json(),
            "zulip_domain": self.zulip_domain,
            "subteams": [t.to_json() for t in self.subteams],
            "wgs": [t.to_json() for t in self.wgs],
            "project_groups": [t.to_json() for t in self.project_groups],
        }


class TeamNotFound(LookupError):
    """No page exists for the requested team."""

    def __init__(self) -> None:
        super().__init__("team not found")


def kind_to_str(kind: TeamKind) -> str:
    """The URL section for a kind of team."""
    return {
        TeamKind.TEAM: "teams",
        TeamKind.WORKING_GROUP: "wgs",
        TeamKind.PROJECT_GROUP: "project-groups",
    }.get(kind, "UNSUPPORTED")


def _by_weight(teams: list[Team]) -> list[Team]:
    return sorted(teams, key=lambda team: team.weight, reverse=True)


@dataclass
class TeamsData:
    """A snapshot of all teams, from which page data is derived."""

    teams: list[Team]

    def index_data(self) -> IndexData:
        """The top-level teams shown on the governance page, heaviest first."""
        entries = [
            IndexTeam(team=team, url=f"{kind_to_str(team.kind)}/{team.website_data.page}")
            for team in self.teams
            if team.website_data is not None
            and team.kind is TeamKind.TEAM
            and team.subteam_of is None
        ]
        entries.sort(key=lambda entry: entry.team.weight, reverse=True)
        return IndexData(teams=entries)

    def page_data(self, section: str, team_name: str) -> PageData:
        """The page of one team, with its subteams, working and project groups."""
        main = next(
            (
                team
                for team in self.teams
                if team.website_data is not None
                and team.website_data.page == team_name
                and kind_to_str(team.kind) == section
            ),
            None,
        )
        if main is None:
            raise TeamNotFound()
        # Subteams have no page of their own, except former working groups now
        # under the launching pad, whose old links must keep working.
        if main.subteam_of is not None and main.subteam_of != LAUNCHING_PAD:
            raise TeamNotFound()

        superteams = {
            team.name: team.subteam_of for team in self.teams if team.subteam_of is not None
        }

        def descends_from_main(name: str) -> bool:
            # The team graph is acyclic, so this walk terminates.
            while (parent := superteams.get(name)) is not None:
                if parent == main.name:
                    return True
                name = parent
            return False

        raw_subteams: list[Team] = []
        wgs: list[Team] = []
        project_groups: list[Team] = []
        for team in self.teams:
            if team.website_data is None or not descends_from_main(team.name):
                continue
            if team.kind is TeamKind.TEAM:
                raw_subteams.append(team)
            elif team.kind is TeamKind.WORKING_GROUP:
                wgs.append(team)
            elif team.kind is TeamKind.PROJECT_GROUP:
                project_groups.append(team)

        raw_subteams = _by_weight(raw_subteams)

        # Parents come before their children; siblings keep their weight order.
        subteams: list[Team] = []

        def lay_out(parent: str) -> None:
            for subteam in raw_subteams:
                if subteam.subteam_of == parent:
                    subteams.append(subteam)
                    lay_out(subteam.name)

        lay_out(main.name)

        return PageData(
            team=main,
            subteams=subteams,
            wgs=_by_weight(wgs),
            project_groups=_by_weight(project_groups),
        )


def encode_zulip_stream(stream: str) -> str:
    """Encode a stream name the way Zulip does in its URLs."""
    return "".join(
        chr(byte)
        if (chr(byte).isascii() and chr(byte).isalnum()) or chr(byte) in "-_"
        else f".{byte:02X}"
        for byte in stream.encode("utf-8")
    )


def fetch_teams() -> list[Team]:
    """Download all teams from the team API."""
    url = f"{BASE_URL}/teams.json"
    with httpx.Client() as client:
        response = client.get(url)
    response.raise_for_status()
    payload = response.json()
    return [Team.from_json(value) for value in payload["teams"].values()]


def _load(teams_cache: Cache[list[Team] | None]) -> TeamsData:
    teams = teams_cache.get()
    if teams is None:
        raise RuntimeError("failed to load teams")
    return TeamsData(list(teams))


def index_data(teams_cache: Cache[list[Team] | None]) -> IndexData:
    """Index data from the cached teams."""
    return _load(teams_cache).index_data()


def page_data(section: str, team_name: str, teams_cache: Cache[list[Team] | None]) -> PageData:
    """Page data for one team from the cached teams."""
    return _load(teams_cache).page_data(section, team_name)
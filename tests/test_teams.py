from unittest.mock import patch

import httpx
import pytest

from wwwsite.cache import Cache
from wwwsite.teams import (
    BASE_URL,
    ZULIP_DOMAIN,
    Team,
    TeamKind,
    TeamMember,
    TeamNotFound,
    TeamsData,
    TeamWebsite,
    encode_zulip_stream,
    fetch_teams,
    index_data,
    kind_to_str,
    page_data,
)


def dummy_team(name):
    return Team(
        name=name,
        kind=TeamKind.TEAM,
        subteam_of=None,
        members=[
            TeamMember("Jupiter Doe", "jupiterd", 123, False, ["convener"]),
            TeamMember("John Doe", "johnd", 456, False, []),
            TeamMember("Jane Doe", "janed", 789, True, []),
        ],
        alumni=[],
        website_data=TeamWebsite(
            name=f"Team {name}",
            description=f"Description of {name}",
            page=name,
            weight=0,
        ),
        roles=[],
    )


def test_index_data():
    foo = dummy_team("foo")
    foo.kind = TeamKind.WORKING_GROUP
    res = TeamsData([foo, dummy_team("bar")]).index_data()
    assert len(res.teams) == 1
    assert res.teams[0].url == "teams/bar"
    assert res.teams[0].team.name == "bar"


def test_index_subteams_are_hidden():
    foo = dummy_team("foo")
    foo.subteam_of = ""
    assert len(TeamsData([foo]).index_data().teams) == 0


def test_index_sorted_by_weight_descending():
    light = dummy_team("light")
    heavy = dummy_team("heavy")
    heavy.website_data.weight = 10
    res = TeamsData([light, heavy]).index_data()
    assert [t.team.name for t in res.teams] == ["heavy", "light"]


def test_page_data():
    main = dummy_team("main")
    subteam = dummy_team("subteam")
    subteam.subteam_of = "main"
    subteam2 = dummy_team("subteam2")
    subteam2.subteam_of = "main"
    subteam2.website_data.weight = 5
    wg = dummy_team("wg")
    wg.subteam_of = "main"
    wg.kind = TeamKind.WORKING_GROUP
    wg.website_data.zulip_stream = "t-compiler/wg-rls-2.0"

    other = dummy_team("other")
    other_subteam = dummy_team("other-subteam")
    other_subteam.subteam_of = "other"
    other_wg = dummy_team("other-wg")
    other_wg.subteam_of = "other"
    other_wg.kind = TeamKind.WORKING_GROUP

    data = TeamsData([main, subteam, subteam2, wg, other, other_subteam, other_wg])
    page = data.page_data("teams", "main")

    assert page.team.name == "main"
    assert len(page.subteams) == 2
    assert page.subteams[0].name == "subteam2"
    assert page.subteams[1].name == "subteam"
    assert len(page.wgs) == 1
    assert page.wgs[0].name == "wg"
    assert page.wgs[0].website_data.zulip_stream == "t-compiler/wg-rls-2.0"
    assert page.zulip_domain == ZULIP_DOMAIN


def test_page_data_lays_out_hierarchy():
    main = dummy_team("main")
    a = dummy_team("a")
    a.subteam_of = "main"
    a.website_data.weight = 1
    b = dummy_team("b")
    b.subteam_of = "main"
    b.website_data.weight = 2
    c = dummy_team("c")
    c.subteam_of = "a"
    page = TeamsData([main, c, a, b]).page_data("teams", "main")
    assert [t.name for t in page.subteams] == ["b", "a", "c"]


def test_missing_pages():
    foo = dummy_team("foo")
    bar = dummy_team("bar")
    bar.kind = TeamKind.WORKING_GROUP
    data = TeamsData([foo, bar])

    with pytest.raises(TeamNotFound):
        data.page_data("teams", "unknown")
    with pytest.raises(TeamNotFound):
        data.page_data("wgs", "foo")
    with pytest.raises(TeamNotFound):
        data.page_data("teams", "bar")


def test_subteams_cant_be_loaded():
    foo = dummy_team("foo")
    foo.subteam_of = "bar"
    data = TeamsData([foo, dummy_team("bar")])
    with pytest.raises(TeamNotFound):
        data.page_data("teams", "foo")


def test_launching_pad_subteams_have_pages():
    wg = dummy_team("wg-secure-code")
    wg.kind = TeamKind.WORKING_GROUP
    wg.subteam_of = "launching-pad"
    data = TeamsData([dummy_team("launching-pad"), wg])
    assert data.page_data("wgs", "wg-secure-code").team.name == "wg-secure-code"


def test_team_not_found_message():
    assert str(TeamNotFound()) == "team not found"


@pytest.mark.parametrize(
    "kind, section",
    [
        (TeamKind.TEAM, "teams"),
        (TeamKind.WORKING_GROUP, "wgs"),
        (TeamKind.PROJECT_GROUP, "project-groups"),
        (TeamKind.MARKER_TEAM, "UNSUPPORTED"),
    ],
)
def test_kind_to_str(kind, section):
    assert kind_to_str(kind) == section


def test_encode_zulip_stream_keeps_safe_characters():
    assert encode_zulip_stream("t-compiler_wg42") == "t-compiler_wg42"


def test_encode_zulip_stream_escapes_with_dots():
    assert encode_zulip_stream("t-compiler/wg-rls-2.0") == "t-compiler.2Fwg-rls-2.2E0"


def test_encode_zulip_stream_never_contains_percent():
    encoded = encode_zulip_stream("100% café ~x")
    assert "%" not in encoded
    assert " " not in encoded


def test_team_json_round_trip():
    team = dummy_team("foo")
    team.roles = [{"id": "convener", "description": "Convener"}]
    team.website_data.zulip_stream = "t-foo"
    assert Team.from_json(team.to_json()) == team


def test_team_kind_accepts_kebab_case():
    assert TeamKind("working-group") is TeamKind.WORKING_GROUP


def test_index_team_json_is_flattened():
    res = TeamsData([dummy_team("bar")]).index_data()
    entry = res.to_json()["teams"][0]
    assert entry["url"] == "teams/bar"
    assert entry["name"] == "bar"
    assert entry["website_data"]["page"] == "bar"


def test_cached_helpers():
    cache = Cache(lambda: None, [dummy_team("bar")], ttl=1000)
    assert index_data(cache).teams[0].team.name == "bar"
    assert page_data("teams", "bar", cache).team.name == "bar"


def test_cached_helpers_without_teams():
    cache = Cache(lambda: None, None, ttl=1000)
    with pytest.raises(RuntimeError):
        index_data(cache)
    with pytest.raises(RuntimeError):
        page_data("teams", "bar", cache)


def test_fetch_teams():
    payload = {"teams": {"bar": dummy_team("bar").to_json()}}
    url = f"{BASE_URL}/teams.json"

    def fake_get(self, requested, *args, **kwargs):
        assert requested == url
        return httpx.Response(200, json=payload, request=httpx.Request("GET", requested))

    with patch.object(httpx.Client, "get", fake_get):
        teams = fetch_teams()
    assert teams == [dummy_team("bar")]


def test_fetch_teams_http_error():
    def fake_get(self, requested, *args, **kwargs):
        return httpx.Response(503, request=httpx.Request("GET", requested))

    with patch.object(httpx.Client, "get", fake_get):
        with pytest.raises(httpx.HTTPStatusError):
            fetch_teams()
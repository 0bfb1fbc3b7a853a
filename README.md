# wwwsite

`wwwsite` is a Flask application that serves a localized project website.
It renders category and subject pages from a `templates/` directory, serves
files from `static/`, builds governance pages from team data fetched over
HTTP, and redirects old URLs and old locale codes to where they live now.

## Installation

```
pip install .
```

## Running

Start the server from the directory that holds the site's files, or point
`--root` at it:

```
wwwsite --root . --host 127.0.0.1 --port 8000
```

All three options are optional; the values shown are the defaults. At start
the command downloads the current stable version, the newest release post and
the team data, then runs Flask's development server.

Two environment variables are read by the command:

- `RUST_WWW_PONTOON`: when set, pages carry the content security policy that
  allows the translation tool's hosts, and templates see `pontoon_enabled`
  as true.
- `ROBOTS_TXT_DISALLOW_ALL`: when set, `/robots.txt` tells every crawler to
  stay away. When it is unset, that path returns 404.

## The site directory

`create_app(root)` expects, under `root`:

- `templates/` with page templates named `<name>.html.hbs`. A category is any
  directory `templates/<category>/` that holds `index.html.hbs`; its subject
  pages are the other `templates/<category>/<subject>.html.hbs` files. The
  templates `index.html.hbs`, `404.html.hbs`, `governance/index.html.hbs` and
  `governance/group.html.hbs` are used as well.
- `locales/<lang>/*.ftl` Fluent message files, plus an optional
  `locales/core.ftl` shared by every locale.
- `src/styles/app.scss`, `src/styles/fonts.scss`, `static/styles/tachyons.css`
  and `static/scripts/tools-install.js`. At start these are written to
  `static/styles/` and `static/scripts/` under content-hashed names, and the
  resulting URL paths are passed to templates as `assets`.
- `static/text/well_known_security.txt`, served at `/.well-known/security.txt`.

## Routes

- `/` and `/<locale>`: the index page, with the cached stable version and a
  link to the newest release post.
- `/<category>` and `/<locale>/<category>`: a category's index page.
- `/<category>/<subject>` and `/<locale>/<category>/<subject>`: a subject
  page; 404 when its template does not exist.
- `/governance` and `/<locale>/governance`: the top-level teams, heaviest
  first.
- `/governance/<section>/<team>` and `/<locale>/governance/<section>/<team>`:
  a team page with its subteams laid out parent before child, its working
  groups and its project groups. Subteams have no page, except those under
  `launching-pad`.
- `/static/...` and `/logos/...`: files, with `cache-control: max-age=3600`.
- `/en-US`: a permanent (308) redirect to `/`.

The supported locales are `en-US`, `es`, `fr`, `it`, `ja`, `pt-BR`, `ru`,
`tr`, `zh-CN` and `zh-TW`; English is served without a prefix.

A request that finds no page is first checked against the redirect tables:
pre-2018 pages, old whitepaper locations, renamed team pages, pages now on
external sites, and old locale codes such as `fr-FR` (mapped to `fr`). An old
locale that is no longer supported gets a temporary (307) redirect; the rest
are permanent (308). Otherwise the `404` template is rendered in the locale
named by the first path segment. Server errors render the same template in
English with status 500.

Every response gets `x-xss-protection`, `strict-transport-security`,
`x-content-type-options`, `referrer-policy` and a `content-security-policy`;
SVG responses get a stricter policy of their own.

## Templates

Templates are rendered by Flask's Jinja2 engine with the variables `page`,
`title`, `parent`, `is_landing`, `data`, `lang`, `baseurl`,
`pontoon_enabled`, `assets`, `locales` and `is_translation`, and with these
functions:

- `fluent(message_id, lang="en-US", **args)`: a localized message, falling
  back to English.
- `team_text(team, param, lang, role_id=None)`: a team's `name`,
  `description` or `role` text; English comes from the team data, other
  languages from their `governance-team-<team>-<param>` or
  `governance-role-<role_id>` message when there is one.
- `encode_zulip_stream(stream)`: a stream name encoded for Zulip URLs.

## Cached data

The stable version, the release post and the team data are each held in a
`wwwsite.cache.Cache`. Once a value is older than 120 seconds, the next read
still returns it and starts a refresh in a background thread. A failed fetch
is reported on stderr and the old value is kept. If no team data has ever
been loaded, governance pages answer with 500.

## Using it as a library

```python
from wwwsite.app import create_app

app = create_app(".", pontoon_enabled=False, robots_disallow_all=False)
app.run()
```

The parts also work on their own:

```python
from wwwsite.redirect import maybe_redirect
from wwwsite.teams import encode_zulip_stream

redirect = maybe_redirect("fr-FR/install.html")
# redirect.location == "/fr/tools/install", redirect.permanent is True

encode_zulip_stream("t-compiler/wg-rls-2.0")
# "t-compiler.2Fwg-rls-2.2E0"
```

- `wwwsite.i18n.FluentLoader(locales_dir, fallback="en-US")` loads the
  Fluent files; `lookup` falls back to the fallback locale and raises
  `KeyError` if neither has the message, `lookup_no_default_fallback`
  returns `None` instead. Messages may use the functions `EMAIL`, `ENGLISH`
  and `NUMBER`.
- `wwwsite.teams.TeamsData(teams)` gives `index_data()` and
  `page_data(section, team_name)`, the latter raising `TeamNotFound`.
- `wwwsite.rust_version.parse_rust_version` and `parse_release_post` read a
  stable channel manifest and a releases feed.

## What it does not do

- It does not compile SCSS. The `.scss` files are published as they are,
  so they must already be plain CSS.
- It does not render Handlebars. Although template files keep the
  `.html.hbs` name, they are read as Jinja2 templates.
- `wwwsite` runs Flask's development server only; for production, serve the
  application returned by `create_app` with a WSGI server of your choice.

## Tests

```
pip install .[test]
pytest
```
"""Localization: Fluent message files, supported locales and team texts."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Union

from wwwsite.teams import Team

ENGLISH = "en-US"
LOCALES_DIR = "locales"


@dataclass(frozen=True)
class LocaleInfo:
    """A locale the site is translated into, with its name in that language."""

    lang: str
    text: str


EXPLICIT_LOCALE_INFO: tuple[LocaleInfo, ...] = (
    LocaleInfo("en-US", "English"),
    LocaleInfo("es", "Español"),
    LocaleInfo("fr", "Français"),
    LocaleInfo("it", "Italiano"),
    LocaleInfo("ja", "日本語"),
    LocaleInfo("pt-BR", "Português"),
    LocaleInfo("ru", "Русский"),
    LocaleInfo("tr", "Türkçe"),
    LocaleInfo("zh-CN", "简体中文"),
    LocaleInfo("zh-TW", "正體中文"),
)

SUPPORTED_LOCALES: frozenset[str] = frozenset(info.lang for info in EXPLICIT_LOCALE_INFO)


def is_supported_locale(param: str) -> bool:
    """Whether a URL segment names one of the site's locales."""
    return param in SUPPORTED_LOCALES


def email_function(value: Any) -> str | None:
    """The EMAIL() Fluent function: a mailto link for a string, else nothing."""
    if not isinstance(value, str):
        return None
    return f"<a href='mailto:{value}' lang='en-US'>{value}</a>"


def english_function(value: Any) -> str | None:
    """The ENGLISH() Fluent function: marks a string as English text."""
    if not isinstance(value, str):
        return None
    return f"<span lang='en-US'>{value}</span>"


class FluentSyntaxError(ValueError):
    """A Fluent resource could not be parsed."""


Value = Union[str, int, float, None]


# ---------------------------------------------------------------------------
# Syntax tree


@dataclass(frozen=True)
class _Literal:
    value: str | int | float


@dataclass(frozen=True)
class _Variable:
    name: str


@dataclass(frozen=True)
class _MessageRef:
    name: str
    attribute: str | None


@dataclass(frozen=True)
class _TermRef:
    name: str
    attribute: str | None
    named: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class _FunctionRef:
    name: str
    positional: tuple[Any, ...]
    named: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class _Select:
    selector: Any
    variants: tuple[tuple[str, tuple], ...]
    default: int


@dataclass
class _Message:
    value: tuple | None
    attributes: dict[str, tuple | None] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Parsing

_IDENT = re.compile(r"[a-zA-Z][a-zA-Z0-9_-]*")
_NUMBER = re.compile(r"-?[0-9]+(?:\.[0-9]+)?")
_ENTRY = re.compile(r"^(-?[a-zA-Z][a-zA-Z0-9_-]*)[ \t]*=(.*)$")
_ATTRIBUTE = re.compile(r"^[ \t]+\.([a-zA-Z][a-zA-Z0-9_-]*)[ \t]*=(.*)$")
_INDENT_AFTER_NEWLINE = re.compile(r"\n[ \t]+")


def _parse_number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


def _clean_variant(elements: list) -> tuple:
    cleaned = [
        _INDENT_AFTER_NEWLINE.sub("\n", e) if isinstance(e, str) else e for e in elements
    ]
    if cleaned and isinstance(cleaned[0], str):
        cleaned[0] = cleaned[0].lstrip()
    if cleaned and isinstance(cleaned[-1], str):
        cleaned[-1] = cleaned[-1].rstrip()
    return tuple(e for e in cleaned if e != "")


class _Parser:
    def __init__(self, source: str):
        self.s = source
        self.pos = 0

    def error(self, message: str) -> FluentSyntaxError:
        return FluentSyntaxError(f"{message} at offset {self.pos} in {self.s!r}")

    def peek(self) -> str:
        return self.s[self.pos] if self.pos < len(self.s) else ""

    def skip_ws(self) -> None:
        while self.peek() in (" ", "\t", "\n", "\r") and self.peek():
            self.pos += 1

    def expect(self, token: str) -> None:
        if not self.s.startswith(token, self.pos):
            raise self.error(f"expected {token!r}")
        self.pos += len(token)

    def top(self) -> tuple:
        return tuple(self.pattern(in_variant=False))

    def pattern(self, in_variant: bool) -> list:
        elements: list = []
        buf: list[str] = []
        while self.pos < len(self.s):
            c = self.s[self.pos]
            if c == "{":
                if buf:
                    elements.append("".join(buf))
                    buf = []
                self.pos += 1
                elements.append(self.placeable())
                continue
            if c == "}":
                if in_variant:
                    break
                raise self.error("unbalanced '}'")
            if in_variant and c == "\n":
                following = self.s[self.pos + 1 :].lstrip(" \t")
                if following[:1] in ("[", "*", "}") and following:
                    break
            buf.append(c)
            self.pos += 1
        if buf:
            elements.append("".join(buf))
        return elements

    def placeable(self) -> Any:
        self.skip_ws()
        expr = self.inline()
        self.skip_ws()
        if self.s.startswith("->", self.pos):
            self.pos += 2
            expr = self.select(expr)
        self.skip_ws()
        self.expect("}")
        return expr

    def select(self, selector: Any) -> _Select:
        variants: list[tuple[str, tuple]] = []
        default: int | None = None
        while True:
            self.skip_ws()
            if self.peek() in ("}", ""):
                break
            is_default = self.peek() == "*"
            if is_default:
                self.pos += 1
            self.expect("[")
            end = self.s.find("]", self.pos)
            if end < 0:
                raise self.error("unterminated variant key")
            key = self.s[self.pos : end].strip()
            self.pos = end + 1
            if is_default:
                if default is not None:
                    raise self.error("more than one default variant")
                default = len(variants)
            variants.append((key, _clean_variant(self.pattern(in_variant=True))))
        if default is None:
            raise self.error("select expression without a default variant")
        return _Select(selector, tuple(variants), default)

    def ident(self) -> str:
        match = _IDENT.match(self.s, self.pos)
        if not match:
            raise self.error("expected an identifier")
        self.pos = match.end()
        return match.group()

    def attribute(self) -> str | None:
        if self.peek() == ".":
            self.pos += 1
            return self.ident()
        return None

    def string(self) -> str:
        self.expect('"')
        out: list[str] = []
        while True:
            c = self.peek()
            if c in ("", "\n"):
                raise self.error("unterminated string literal")
            self.pos += 1
            if c == '"':
                return "".join(out)
            if c != "\\":
                out.append(c)
                continue
            escaped = self.peek()
            self.pos += 1
            if escaped in ('"', "\\"):
                out.append(escaped)
            elif escaped in ("u", "U"):
                width = 4 if escaped == "u" else 6
                digits = self.s[self.pos : self.pos + width]
                if len(digits) != width or not all(d in "0123456789abcdefABCDEF" for d in digits):
                    raise self.error("invalid unicode escape")
                out.append(chr(int(digits, 16)))
                self.pos += width
            else:
                raise self.error("invalid escape sequence")

    def inline(self) -> Any:
        c = self.peek()
        if c == '"':
            return _Literal(self.string())
        if c == "{":
            self.pos += 1
            return self.placeable()
        if c == "$":
            self.pos += 1
            return _Variable(self.ident())
        number = _NUMBER.match(self.s, self.pos)
        if number:
            self.pos = number.end()
            return _Literal(_parse_number(number.group()))
        if c == "-":
            self.pos += 1
            name = self.ident()
            attribute = self.attribute()
            named: tuple[tuple[str, Any], ...] = ()
            if self.peek() == "(":
                _, named = self.call_args()
            return _TermRef(name, attribute, named)
        name = self.ident()
        if self.peek() == "(":
            if not name.isupper():
                raise self.error(f"invalid function name {name!r}")
            positional, named = self.call_args()
            return _FunctionRef(name, positional, named)
        return _MessageRef(name, self.attribute())

    def call_args(self) -> tuple[tuple[Any, ...], tuple[tuple[str, Any], ...]]:
        self.expect("(")
        positional: list[Any] = []
        named: dict[str, Any] = {}
        while True:
            self.skip_ws()
            if self.peek() == ")":
                self.pos += 1
                break
            match = _IDENT.match(self.s, self.pos)
            remainder = self.s[match.end() :].lstrip(" \t\n") if match else ""
            if match and remainder.startswith(":"):
                self.pos = len(self.s) - len(remainder) + 1
                self.skip_ws()
                named[match.group()] = self.inline()
            else:
                positional.append(self.inline())
            self.skip_ws()
            if self.peek() == ",":
                self.pos += 1
            elif self.peek() != ")":
                raise self.error("expected ',' or ')'")
        return tuple(positional), tuple(named.items())


def _depth(line: str) -> int:
    return line.count("{") - line.count("}")


def _compile(lines: list[str]) -> tuple | None:
    first, rest = lines[0].lstrip(" "), lines[1:]
    cut = min((len(line) - len(line.lstrip(" ")) for line in rest if line.strip()), default=0)
    text_lines = ([first] if first else []) + [line[cut:] for line in rest]
    text = "\n".join(text_lines).strip("\n").rstrip()
    if not text:
        return None
    return _Parser(text).top()


def _parse_entry(first: str, continuation: list[str]) -> _Message:
    value_lines = [first]
    attribute_lines: dict[str, list[str]] = {}
    target = value_lines
    depth = _depth(first)
    for line in continuation:
        match = _ATTRIBUTE.match(line) if depth <= 0 else None
        if match:
            target = [match.group(2)]
            attribute_lines[match.group(1)] = target
            depth = _depth(match.group(2))
            continue
        target.append(line)
        depth += _depth(line)
    return _Message(
        value=_compile(value_lines),
        attributes={name: _compile(lines) for name, lines in attribute_lines.items()},
    )


def _blocks(text: str):
    current: tuple[str, list[str]] | None = None
    pending: list[str] = []
    for line in text.splitlines():
        if current is not None and (line.startswith(" ") or line.startswith("}")):
            current[1].extend(pending)
            pending.clear()
            current[1].append(line)
            continue
        if current is not None and not line.strip():
            pending.append(line)
            continue
        if current is not None:
            yield current
            current = None
            pending.clear()
        if not line.strip() or line.startswith("#"):
            continue
        match = _ENTRY.match(line)
        if match:
            current = (match.group(1), [match.group(2)])
    if current is not None:
        yield current


def _parse_ftl(text: str) -> dict[str, _Message]:
    entries: dict[str, _Message] = {}
    for name, lines in _blocks(text):
        entries.setdefault(name, _parse_entry(lines[0], lines[1:]))
    return entries


# ---------------------------------------------------------------------------
# Formatting


def _plural_category(lang: str, number: int | float) -> str:
    language = lang.split("-", 1)[0]
    if language in ("ja", "zh"):
        return "other"
    if language in ("fr", "pt"):
        return "one" if 0 <= number < 2 else "other"
    if language == "ru":
        if not float(number).is_integer():
            return "other"
        n = abs(int(number))
        if n % 10 == 1 and n % 100 != 11:
            return "one"
        if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
            return "few"
        return "many"
    return "one" if number == 1 else "other"


def _display(value: Value) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def _is_number(value: Value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number_function(positional: list[Value], named: dict[str, Value]) -> Value:
    value = positional[0] if positional else None
    if _is_number(value):
        return value
    if isinstance(value, str) and _NUMBER.fullmatch(value):
        return _parse_number(value)
    return None


_FUNCTIONS: dict[str, Callable[[list[Value], dict[str, Value]], Value]] = {
    "EMAIL": lambda positional, named: email_function(positional[0] if positional else None),
    "ENGLISH": lambda positional, named: english_function(positional[0] if positional else None),
    "NUMBER": _number_function,
}

_MAX_DEPTH = 64


class _Bundle:
    def __init__(self, lang: str):
        self.lang = lang
        self.entries: dict[str, _Message] = {}

    def add(self, entries: Mapping[str, _Message]) -> None:
        for name, message in entries.items():
            self.entries.setdefault(name, message)

    def format(self, message_id: str, args: Mapping[str, Value]) -> str | None:
        message = self.entries.get(message_id)
        if message is None or message.value is None or message_id.startswith("-"):
            return None
        return self._pattern(message.value, args, 0)

    def _pattern(self, pattern: tuple, args: Mapping[str, Value], depth: int) -> str:
        if depth > _MAX_DEPTH:
            raise ValueError("cyclic reference in Fluent messages")
        return "".join(
            element if isinstance(element, str) else _display(self._value(element, args, depth))
            for element in pattern
        )

    def _reference(self, key: str, attribute: str | None, args: Mapping[str, Value], depth: int) -> str:
        shown = "{" + key + (f".{attribute}" if attribute else "") + "}"
        message = self.entries.get(key)
        if message is None:
            return shown
        pattern = message.value if attribute is None else message.attributes.get(attribute)
        if pattern is None:
            return shown
        return self._pattern(pattern, args, depth + 1)

    def _value(self, expr: Any, args: Mapping[str, Value], depth: int) -> Value:
        if isinstance(expr, _Literal):
            return expr.value
        if isinstance(expr, _Variable):
            return args.get(expr.name, "{$" + expr.name + "}")
        if isinstance(expr, _MessageRef):
            return self._reference(expr.name, expr.attribute, args, depth)
        if isinstance(expr, _TermRef):
            term_args = {name: self._value(value, args, depth) for name, value in expr.named}
            return self._reference(f"-{expr.name}", expr.attribute, term_args, depth)
        if isinstance(expr, _FunctionRef):
            function = _FUNCTIONS.get(expr.name)
            if function is None:
                return "{" + expr.name + "()}"
            positional = [self._value(value, args, depth) for value in expr.positional]
            named = {name: self._value(value, args, depth) for name, value in expr.named}
            return function(positional, named)
        if isinstance(expr, _Select):
            selector = self._value(expr.selector, args, depth)
            return self._pattern(self._choose(expr, selector), args, depth + 1)
        raise TypeError(f"unknown Fluent expression {expr!r}")

    def _choose(self, expr: _Select, selector: Value) -> tuple:
        if _is_number(selector):
            for key, pattern in expr.variants:
                if _NUMBER.fullmatch(key) and float(key) == float(selector):
                    return pattern
            category = _plural_category(self.lang, selector)
            for key, pattern in expr.variants:
                if key == category:
                    return pattern
        elif selector is not None:
            for key, pattern in expr.variants:
                if key == str(selector):
                    return pattern
        return expr.variants[expr.default][1]


class FluentLoader:
    """Fluent messages from ``locales_dir/<lang>/*.ftl`` plus a shared ``core.ftl``."""

    def __init__(self, locales_dir: str | PathLike[str] = LOCALES_DIR, fallback: str = ENGLISH):
        root = Path(locales_dir)
        self.fallback = fallback
        core_path = root / "core.ftl"
        core = _parse_ftl(core_path.read_text(encoding="utf-8")) if core_path.is_file() else {}
        self._bundles: dict[str, _Bundle] = {}
        if root.is_dir():
            for lang_dir in sorted(p for p in root.iterdir() if p.is_dir()):
                bundle = _Bundle(lang_dir.name)
                for path in sorted(lang_dir.rglob("*.ftl")):
                    bundle.add(_parse_ftl(path.read_text(encoding="utf-8")))
                bundle.add(core)
                self._bundles[lang_dir.name] = bundle

    @property
    def locales(self) -> frozenset[str]:
        """The locales that have message files."""
        return frozenset(self._bundles)

    def lookup_no_default_fallback(
        self, lang: str, message_id: str, args: Mapping[str, Value] | None = None
    ) -> str | None:
        """The message in ``lang`` alone, or None if it has none."""
        bundle = self._bundles.get(lang)
        if bundle is None:
            return None
        return bundle.format(message_id, args or {})

    def lookup(self, lang: str, message_id: str, args: Mapping[str, Value] | None = None) -> str:
        """The message in ``lang``, else in the fallback locale; KeyError if in neither."""
        for candidate in dict.fromkeys((lang, self.fallback)):
            text = self.lookup_no_default_fallback(candidate, message_id, args)
            if text is not None:
                return text
        raise KeyError(f"unknown localization {message_id!r}")


# ---------------------------------------------------------------------------
# Team texts

_TEAM_TEXT_PARAMS = ("name", "description", "role")


def _english_team_text(team: Mapping[str, Any], param: str, role_id: str | None) -> str:
    if param == "role":
        return next(
            (role["description"] for role in team.get("roles") or [] if role.get("id") == role_id),
            # The team data guarantees every member role has a definition.
            role_id,
        )
    return team["website_data"][param]


def _fluent_id(team_name: str, param: str, role_id: str | None) -> str:
    if param == "role":
        return f"governance-role-{role_id}"
    return f"governance-team-{team_name}-{param}"


def team_text(
    loader: FluentLoader,
    team: Team | Mapping[str, Any],
    param: str,
    lang: str,
    role_id: str | None = None,
) -> str:
    """A team's name, description or role description in ``lang``.

    English comes straight from the team data so that it stays current; other
    languages use their translation, falling back to that English text.
    """
    if param not in _TEAM_TEXT_PARAMS:
        raise ValueError(f"unrecognized {{{{team-text}}}} param {param!r}")
    if param == "role" and role_id is None:
        raise ValueError("{{team-text}} requires a third parameter for the role id")
    data = team.to_json() if isinstance(team, Team) else team
    if lang != ENGLISH:
        translated = loader.lookup_no_default_fallback(
            lang, _fluent_id(data["name"], param, role_id)
        )
        if translated is not None:
            return translated
    return _english_team_text(data, param, role_id)
"""
Label selector parsing and matching.

A selector is a conjunction of requirements over a label mapping. The accepted
syntax is the one used by the Kubernetes API server and kubectl:

- ``key`` / ``!key``: the label is present / absent
- ``key=value``, ``key==value``: the label is present with the given value
- ``key!=value``: the label is absent or has a different value
- ``key in (v1,v2)``: the label is present with one of the values
- ``key notin (v1,v2)``: the label is absent or has none of the values

Requirements are separated by commas. An empty selector matches everything.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Mapping

from nodeevac.errors import InvalidSelectorError

_KEY_CHARS = r"[^\s!=(),]+"
_SET_RE = re.compile(rf"^(?P<key>{_KEY_CHARS})\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")
_NOT_EXISTS_RE = re.compile(rf"^!\s*(?P<key>{_KEY_CHARS})$")
_EQUALITY_RE = re.compile(rf"^(?P<key>{_KEY_CHARS})\s*(?P<op>==|!=|=)\s*(?P<value>[^\s!=(),]*)$")
_EXISTS_RE = re.compile(rf"^(?P<key>{_KEY_CHARS})$")

_NAME_RE = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_DNS_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_MAX_NAME_LENGTH = 63
_MAX_PREFIX_LENGTH = 253


class Operator(str, Enum):
    """Selector requirement operators."""

    EXISTS = "exists"
    DOES_NOT_EXIST = "!"
    EQUALS = "="
    NOT_EQUALS = "!="
    IN = "in"
    NOT_IN = "notin"


@dataclass(frozen=True)
class Requirement:
    """A single selector requirement over one label key."""

    key: str
    operator: Operator
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        """Check whether the label mapping satisfies this requirement.

        :param labels: Label mapping of an object
        :return: True if the requirement holds
        """
        match self.operator:
            case Operator.EXISTS:
                return self.key in labels
            case Operator.DOES_NOT_EXIST:
                return self.key not in labels
            case Operator.EQUALS | Operator.IN:
                return self.key in labels and labels[self.key] in self.values
            case Operator.NOT_EQUALS | Operator.NOT_IN:
                return self.key not in labels or labels[self.key] not in self.values
        return False

    def __str__(self) -> str:
        match self.operator:
            case Operator.EXISTS:
                return self.key
            case Operator.DOES_NOT_EXIST:
                return f"!{self.key}"
            case Operator.EQUALS | Operator.NOT_EQUALS:
                return f"{self.key}{self.operator.value}{self.values[0]}"
            case _:
                return f"{self.key} {self.operator.value} ({','.join(self.values)})"


class LabelSelector:
    """Typed label selector: a conjunction of requirements."""

    def __init__(self, requirements: Iterable[Requirement] = ()) -> None:
        self.requirements: tuple[Requirement, ...] = tuple(requirements)

    @classmethod
    def parse(cls, expression: str | None) -> "LabelSelector":
        """Parse a selector expression.

        :param expression: Selector string (e.g., "app=web,tier in (frontend,cache)")
        :return: Parsed selector
        :raises InvalidSelectorError: If the expression is malformed
        """
        expression = (expression or "").strip()
        if not expression:
            return cls()
        return cls(_parse_requirement(expression, part) for part in _split(expression))

    @classmethod
    def from_set(cls, labels: Mapping[str, str] | None) -> "LabelSelector":
        """Build an equality selector matching every key/value pair of the mapping.

        An empty or missing mapping yields a selector that matches everything.

        :param labels: Label mapping (e.g., a replication controller's spec.selector)
        :return: Equality selector
        """
        return cls(
            Requirement(key, Operator.EQUALS, (value,))
            for key, value in sorted((labels or {}).items())
        )

    def matches(self, labels: Mapping[str, str] | None) -> bool:
        """Check whether every requirement holds for the label mapping.

        :param labels: Label mapping of an object, None is treated as empty
        :return: True if the selector matches
        """
        values = labels or {}
        return all(requirement.matches(values) for requirement in self.requirements)

    def is_empty(self) -> bool:
        return not self.requirements

    def __str__(self) -> str:
        return ",".join(str(requirement) for requirement in self.requirements)

    def __repr__(self) -> str:
        return f"LabelSelector({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LabelSelector):
            return NotImplemented
        return self.requirements == other.requirements

    def __hash__(self) -> int:
        return hash(self.requirements)


def _split(expression: str) -> list[str]:
    """Split on top-level commas, leaving commas inside parentheses alone."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in expression:
        if char == "(":
            depth += 1
            if depth > 1:
                raise InvalidSelectorError(expression, "nested parentheses")
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise InvalidSelectorError(expression, "unbalanced parentheses")
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise InvalidSelectorError(expression, "unbalanced parentheses")
    parts.append("".join(current))
    return parts


def _parse_requirement(expression: str, part: str) -> Requirement:
    part = part.strip()
    if not part:
        raise InvalidSelectorError(expression, "empty requirement")

    if match := _SET_RE.match(part):
        raw_values = match.group("values").strip()
        if not raw_values:
            raise InvalidSelectorError(
                expression, f"'{match.group('op')}' requires at least one value"
            )
        values = tuple(v.strip() for v in raw_values.split(","))
        operator = Operator.IN if match.group("op") == "in" else Operator.NOT_IN
    elif match := _NOT_EXISTS_RE.match(part):
        values = ()
        operator = Operator.DOES_NOT_EXIST
    elif match := _EQUALITY_RE.match(part):
        values = (match.group("value"),)
        operator = Operator.NOT_EQUALS if match.group("op") == "!=" else Operator.EQUALS
    elif match := _EXISTS_RE.match(part):
        values = ()
        operator = Operator.EXISTS
    else:
        raise InvalidSelectorError(expression, f"unable to parse requirement '{part}'")

    key = match.group("key")
    _validate_key(expression, key)
    for value in values:
        _validate_value(expression, value)
    return Requirement(key, operator, values)


def _validate_key(expression: str, key: str) -> None:
    prefix, _, name = key.rpartition("/")
    if "/" in key and (
        not prefix or len(prefix) > _MAX_PREFIX_LENGTH or not _DNS_SUBDOMAIN_RE.match(prefix)
    ):
        raise InvalidSelectorError(expression, f"invalid label key prefix in '{key}'")
    if len(name) > _MAX_NAME_LENGTH or not _NAME_RE.match(name):
        raise InvalidSelectorError(expression, f"invalid label key '{key}'")


def _validate_value(expression: str, value: str) -> None:
    if value and (len(value) > _MAX_NAME_LENGTH or not _NAME_RE.match(value)):
        raise InvalidSelectorError(expression, f"invalid label value '{value}'")

"""
Typed per-node configuration records.

Every node carries exactly one configuration record from a closed set. The
record's dataclass fields double as its schema: each field declares its
FieldKind, label and (for choices) the allowed values in its metadata, so the
property panel and the graph store read the same definition.

The two advanced flags (retry_on_failure, continue_on_error) live on the base
record and are therefore present for every node type. They are stored, never
interpreted.
"""

import dataclasses
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, Union


class FieldKind(Enum):
    TEXT = 'text'
    LONG_TEXT = 'long_text'
    CHOICE = 'choice'
    NUMBER = 'number'
    TOGGLE = 'toggle'


GENERAL = 'general'
CONFIG = 'config'
ADVANCED = 'advanced'


@dataclass(frozen=True)
class FieldSpec:
    """Declared shape of one editable field."""
    key: str
    label: str
    kind: FieldKind
    section: str = CONFIG
    choices: Tuple[str, ...] = ()
    placeholder: str = ''


def _field(default: Any, kind: FieldKind, label: str, section: str = CONFIG,
           choices: Tuple[str, ...] = (), placeholder: str = ''):
    return field(default=default, metadata={
        'kind': kind,
        'label': label,
        'section': section,
        'choices': choices,
        'placeholder': placeholder,
    })


@dataclass(frozen=True)
class BaseNodeConfig:
    """Settings shared by every node type; also the record for field-less types."""
    retry_on_failure: bool = _field(False, FieldKind.TOGGLE, 'Retry on failure', ADVANCED)
    continue_on_error: bool = _field(False, FieldKind.TOGGLE, 'Continue on error', ADVANCED)


@dataclass(frozen=True)
class HttpRequestConfig(BaseNodeConfig):
    method: Optional[str] = _field(None, FieldKind.CHOICE, 'Method',
                                   choices=('GET', 'POST', 'PUT', 'DELETE'),
                                   placeholder='Select method')
    url: str = _field('', FieldKind.TEXT, 'URL', placeholder='https://api.example.com/endpoint')
    headers: str = _field('', FieldKind.LONG_TEXT, 'Headers', placeholder='Content-Type: application/json')


@dataclass(frozen=True)
class EmailConfig(BaseNodeConfig):
    to: str = _field('', FieldKind.TEXT, 'To', placeholder='recipient@example.com')
    subject: str = _field('', FieldKind.TEXT, 'Subject', placeholder='Email subject')
    body: str = _field('', FieldKind.LONG_TEXT, 'Body', placeholder='Email content...')


@dataclass(frozen=True)
class DatabaseConfig(BaseNodeConfig):
    operation: Optional[str] = _field(None, FieldKind.CHOICE, 'Operation',
                                      choices=('SELECT', 'INSERT', 'UPDATE', 'DELETE'),
                                      placeholder='Select operation')
    query: str = _field('', FieldKind.LONG_TEXT, 'Query', placeholder='SELECT * FROM users WHERE...')


@dataclass(frozen=True)
class DelayConfig(BaseNodeConfig):
    duration_seconds: Optional[float] = _field(None, FieldKind.NUMBER, 'Duration (seconds)',
                                               placeholder='30')


NodeConfig = Union[BaseNodeConfig, HttpRequestConfig, EmailConfig, DatabaseConfig, DelayConfig]

# Names used by the node type catalog to pick a record
CONFIG_RECORDS: Dict[str, Type[BaseNodeConfig]] = {
    'basic': BaseNodeConfig,
    'http': HttpRequestConfig,
    'email': EmailConfig,
    'database': DatabaseConfig,
    'delay': DelayConfig,
}


def field_specs(config_cls: Type[BaseNodeConfig]) -> Tuple[FieldSpec, ...]:
    """Return the declared fields of a config record, type-specific fields first."""
    specs = []
    for f in dataclasses.fields(config_cls):
        meta = f.metadata
        specs.append(FieldSpec(
            key=f.name,
            label=meta['label'],
            kind=meta['kind'],
            section=meta['section'],
            choices=tuple(meta['choices']),
            placeholder=meta['placeholder'],
        ))
    # Base fields come first in dataclass order; show them last
    return tuple(s for s in specs if s.section != ADVANCED) + tuple(s for s in specs if s.section == ADVANCED)


def get_field_spec(config: NodeConfig, key: str) -> Optional[FieldSpec]:
    for spec in field_specs(type(config)):
        if spec.key == key:
            return spec
    return None


def is_valid_value(spec: FieldSpec, value: Any) -> bool:
    """Check that a value matches the declared kind of a field."""
    if spec.kind is FieldKind.TOGGLE:
        return isinstance(value, bool)
    if spec.kind is FieldKind.NUMBER:
        if value is None:
            return True
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        try:
            return math.isfinite(value)
        except OverflowError:
            # ints beyond float range
            return False
    if spec.kind is FieldKind.CHOICE:
        return value is None or value in spec.choices
    if spec.kind in (FieldKind.TEXT, FieldKind.LONG_TEXT):
        return isinstance(value, str)
    raise TypeError(f"Unhandled field kind: {spec.kind!r}")


def with_value(config: NodeConfig, key: str, value: Any) -> Optional[NodeConfig]:
    """
    Return a copy of config with one field replaced.

    Returns None when the field is not declared by this record or the value
    does not match its kind.
    """
    spec = get_field_spec(config, key)
    if spec is None or not is_valid_value(spec, value):
        return None
    return dataclasses.replace(config, **{key: value})


def config_value(config: NodeConfig, key: str, default: Any = None) -> Any:
    if get_field_spec(config, key) is None:
        return default
    return getattr(config, key)

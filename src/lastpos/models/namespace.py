"""Namespace descriptions.

The device and mobile namespaces are independent identifier spaces: the
same literal id under ``gps:last:`` and ``mobile:last:`` names unrelated
entities.
"""

from __future__ import annotations

import dataclasses
from enum import StrEnum

from lastpos._constants import DEFAULT_DEVICE_KEY_PREFIX, DEFAULT_MOBILE_KEY_PREFIX, SERVICE_NAMES
from lastpos.models.view import View


class Namespace(StrEnum):
    DEVICE = "device"
    MOBILE = "mobile"


@dataclasses.dataclass(frozen=True)
class NamespaceSpec:
    """Static description of one namespace.

    ``id_field`` is the identifier attribute producers write into
    field-map records; ``legacy_id_fields`` are older spellings accepted
    when it is missing.
    """

    namespace: Namespace
    key_prefix: str
    id_field: str
    legacy_id_fields: tuple[str, ...] = ()
    label: str = "entity"
    list_view: View = View.FULL

    @property
    def key_pattern(self) -> str:
        return f"{self.key_prefix}*"

    @property
    def id_fields(self) -> tuple[str, ...]:
        return (self.id_field, *self.legacy_id_fields)

    @property
    def service_name(self) -> str:
        return SERVICE_NAMES.get(str(self.namespace), f"{self.namespace}-last-position-api")

    def key_for(self, entity_id: str) -> str:
        return f"{self.key_prefix}{entity_id}"

    def id_from_key(self, key: str) -> str:
        if key.startswith(self.key_prefix):
            return key[len(self.key_prefix) :]
        return key


def device_namespace(key_prefix: str = DEFAULT_DEVICE_KEY_PREFIX) -> NamespaceSpec:
    return NamespaceSpec(
        namespace=Namespace.DEVICE,
        key_prefix=key_prefix,
        id_field="deviceId",
        label="device",
        list_view=View.GPS,
    )


def mobile_namespace(key_prefix: str = DEFAULT_MOBILE_KEY_PREFIX) -> NamespaceSpec:
    return NamespaceSpec(
        namespace=Namespace.MOBILE,
        key_prefix=key_prefix,
        id_field="userId",
        legacy_id_fields=("deviceId",),
        label="mobile user",
        list_view=View.MOBILE,
    )

"""
Immutable per-request values handed to every hook handler.

Handlers never read ``flask.request`` directly; tests build these objects
by hand and call the handlers without a web server.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from hidden_archives.security.permissions import has_capability


def _frozen(mapping=None) -> Mapping[str, str]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class Actor:
    user_id: Optional[str] = None
    role: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    def can(self, capability: str) -> bool:
        return self.is_authenticated and has_capability(self.role, capability)


ANONYMOUS = Actor()


@dataclass(frozen=True)
class RequestContext:
    path: str
    url: str
    host_url: str
    method: str = "GET"
    referrer: Optional[str] = None
    args: Mapping[str, str] = field(default_factory=_frozen)
    form: Mapping[str, str] = field(default_factory=_frozen)
    is_admin: bool = False
    actor: Actor = ANONYMOUS

    def __post_init__(self):
        # Accept plain dicts from callers but never keep a mutable reference.
        object.__setattr__(self, "args", _frozen(self.args))
        object.__setattr__(self, "form", _frozen(self.form))

    @classmethod
    def from_request(cls, req, actor: Actor = ANONYMOUS, admin_prefix: str = "/admin") -> "RequestContext":
        is_admin = req.blueprint == "admin" or req.path == admin_prefix or req.path.startswith(admin_prefix + "/")
        return cls(
            path=req.path,
            url=req.url,
            host_url=req.host_url,
            method=req.method,
            referrer=req.referrer,
            args=req.args.to_dict(),
            form=req.form.to_dict(),
            is_admin=is_admin,
            actor=actor,
        )

"""
Error chains.

Every layer wraps the error it received with the package, struct and function
it was caught in, plus some context and tags. The rendered chain goes to the
logs; only the `external` message is ever shown to API callers.

    e = errors.pkg("songs").struct("db").fn("get").tag("name", name)
    raise e.db(err, "querying songs") from err
"""
import logging
from typing import Any, Iterator, List, Optional, Tuple

UNKNOWN = "unknown error"


def pkg(name: str, log: Optional[logging.Logger] = None) -> "Package":
    return Package(name, log or logging.getLogger(f"music.{name}"))


class Package:
    def __init__(self, name: str, log: logging.Logger):
        self.name = name
        self.log = log

    def struct(self, name: str) -> "Struct":
        return Struct(self, name)


class Struct:
    def __init__(self, pkg: Package, name: str):
        self.pkg = pkg
        self.name = name

    def fn(self, name: str) -> "Function":
        return Function(self, name)


class Function:
    """
    Creates chain links for a single function. Tagging returns a new handle,
    so a handle can be shared between calls.
    """

    def __init__(self, strct: Struct, name: str, tags: Tuple[Tuple[str, Any], ...] = ()):
        self.strct = strct
        self.name = name
        self.tags = tags

    @property
    def label(self) -> str:
        return f"{self.strct.pkg.name}.{self.strct.name}.{self.name}"

    def tag(self, key: str, value: Any) -> "Function":
        return Function(self.strct, self.name, self.tags + ((key, value),))

    def _link(self, e, ctx, external, cls=None) -> "Chain":
        if cls is None:
            # the failure kind travels with the chain
            cls = type(e) if isinstance(e, Chain) else Chain
        return cls(e, ctx, external, self)

    def new(self, ctx: str) -> "Chain":
        return self._link(Exception(ctx), ctx, "")

    def wrap(self, e: Optional[BaseException], ctx: str, *args) -> Optional["Chain"]:
        if e is None:
            return None
        return self._link(e, ctx % args if args else ctx, "")

    def json(self, e: BaseException, ctx: str) -> "ValidationFailure":
        return self._link(e, ctx, "invalid json", ValidationFailure)

    def not_found(self) -> "Chain":
        return self._link(self.new("not found"), "", "resource not found", Chain)

    def uk(self, e: Optional[BaseException]) -> "Chain":
        if e is None:
            e = self.new("unknown error")
        return self._link(e, "", UNKNOWN, Chain)

    def db(self, e: BaseException, ctx: str = "") -> "TransportFailure":
        return self._link(e, ctx, "problem in database", TransportFailure)

    def invalid(self, ctx: str) -> "ValidationFailure":
        return self._link(Exception(ctx), ctx, "invalid data sent", ValidationFailure)


class Chain(Exception):
    def __init__(self, previous: BaseException, ctx: str, external: str, fn: Function):
        super().__init__(ctx)
        self.previous = previous
        self.ctx = ctx
        self.fn = fn
        self._external = external

    @property
    def strct(self) -> Struct:
        return self.fn.strct

    @property
    def pkg(self) -> Package:
        return self.fn.strct.pkg

    def links(self) -> Iterator["Chain"]:
        """Yields this link and every chained link below it, outermost first."""
        link = self
        while isinstance(link, Chain):
            yield link
            link = link.previous

    @property
    def origin(self) -> Optional[BaseException]:
        *_, last = self.links()
        return last.previous

    @property
    def external(self) -> str:
        for link in self.links():
            if link._external:
                return link._external
        return ""

    def tags(self) -> List[Tuple[str, Any]]:
        merged = {}
        for link in self.links():
            for key, value in link.fn.tags:
                # deeper links overwrite the value, the key keeps its first position
                merged[key] = value
        return list(merged.items())

    def __str__(self):
        links = list(self.links())
        origin = self.origin
        return "ERROR {} | CONTEXT {} | TAGS: {} | STACK: {}".format(
            "nil" if origin is None else str(origin),
            " <- ".join(link.ctx for link in links),
            ", ".join(f"{k}->{v}" for k, v in self.tags()),
            " <- ".join(link.fn.label for link in links),
        )


class ValidationFailure(Chain):
    """The caller sent something we can't use."""


class TransportFailure(Chain):
    """The database could not be reached or refused the statement."""


def original_error(err: BaseException) -> str:
    text = str(err)
    if text.startswith("ERROR "):
        text = text[len("ERROR "):]
    return text.split(" | CONTEXT ", 1)[0]


def external(err: BaseException) -> str:
    if isinstance(err, Chain) and err.external:
        return err.external
    return UNKNOWN

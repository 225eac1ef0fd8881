"""HTTP surface of the auth service, mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*parts: str) -> str:
    return "/" + "/".join(p.strip("/") for p in parts if p.strip("/"))


def mount(app: Flask, prefix: str, entries: Iterable[tuple[Blueprint, str]]) -> None:
    """Register each ``(blueprint, subpath)`` at ``prefix/subpath``."""

    for bp, subpath in entries:
        app.register_blueprint(bp, url_prefix=_join(prefix, subpath))


def init_app(app: Flask) -> None:
    from portal_auth.api.v1 import API_VERSION, REGISTRY

    mount(app, _join(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION), REGISTRY)


__all__ = ["init_app", "mount"]

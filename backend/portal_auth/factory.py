"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from portal_auth.core.config import BaseConfig, get_config
from portal_auth.core.logger import configure_logging, init_app as init_logging
from portal_auth.services._shared.ports import MemberDirectory, Notifier


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
    members: MemberDirectory | None = None,
    notifier: Notifier | None = None,
) -> Flask:
    """Build and configure the Flask application.

    ``members`` is how a deployment plugs in its account lookup for code
    login; ``notifier`` overrides the one chosen by ``MAIL_BACKEND``.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Client address feeds rate limiting; trust one proxy hop when enabled
    if app.config.get("USE_PROXYFIX", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore[method-assign]

    from portal_auth.core import extensions

    extensions.init_app(app, members=members, notifier=notifier)

    init_logging(app)

    from portal_auth.core import cors

    cors.init_app(app)

    from portal_auth.api import init_app as init_api

    init_api(app)

    from portal_auth.core import errors

    errors.init_app(app)

    return app

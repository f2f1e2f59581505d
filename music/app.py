import logging

import flask

from . import artists, logs, songs
from .config import Config
from .persist import Conn, Querier

L = logging.getLogger("music.app")


def create_app(cfg: Config, sql: Querier = None) -> flask.Flask:
    """
    Builds the flask app for `cfg`. Connects to the configured database unless
    a querier is handed in.
    """
    if sql is None:
        sql = Conn.from_config(cfg)

    app = flask.Flask(__name__)
    app.config['MUSIC'] = cfg

    @app.before_request
    def request_logger():
        L.info("Request: {} {}".format(flask.request.method, flask.request.path))

    @app.route("/ping")
    def ping():
        return "pong"

    _, songs_api = songs.new(sql)
    _, artists_api = artists.new(sql)
    app.register_blueprint(songs.blueprint(songs_api))
    app.register_blueprint(artists.blueprint(artists_api))

    logs.debug(L, "App ready", scope=cfg.scope, version=cfg.app_version)
    return app

import logging
from typing import List, Optional

import flask
from sqlalchemy.exc import SQLAlchemyError

from . import errors
from .persist import Querier
from .types import Artist
from .web import Context, controller

L = logging.getLogger("music.artists")


def new(sql: Querier):
    e = errors.pkg("artists", L)
    s = Service(DB(sql, e.struct("db")), e.struct("service"))
    return s, API(s, e.struct("api"))


def blueprint(api: "API") -> flask.Blueprint:
    bp = flask.Blueprint("artists", __name__, url_prefix="/artists")
    bp.add_url_rule("", "get_artists", controller(api.get_artists), methods=["GET"])
    bp.add_url_rule("/<name>", "get_artist_by_name", controller(api.get_artist_by_name), methods=["GET"])
    bp.add_url_rule("/<name>", "create_artist", controller(api.create_artist), methods=["POST"])
    bp.add_url_rule("/<name>", "delete_artist", controller(api.delete_artist), methods=["DELETE"])
    return bp


class API:
    def __init__(self, s: "Service", err: errors.Struct):
        self.s = s
        self.err = err

    def get_artists(self, c: Context):
        e = self.err.fn("get_artists")
        try:
            artists = self.s.get_artists()
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 200, [artist.json() for artist in artists], None

    def get_artist_by_name(self, c: Context):
        name = c.param("name")
        e = self.err.fn("get_artist_by_name").tag("name", name)
        try:
            artist = self.s.get_artist_by_name(name)
        except errors.Chain as err:
            return 500, None, e.uk(err)
        if artist is None:
            return 404, None, e.not_found()
        return 200, artist.json(), None

    def create_artist(self, c: Context):
        name = c.param("name")
        e = self.err.fn("create_artist").tag("name", name)
        try:
            artist = c.bind_json(Artist)
        except ValueError as err:
            return 400, None, e.json(err, "binding")
        if not artist.name:
            artist.name = name
        try:
            self.s.save_artist(artist)
        except errors.ValidationFailure as err:
            return 400, None, e.wrap(err, "saving artist")
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 201, None, None

    def delete_artist(self, c: Context):
        name = c.param("name")
        e = self.err.fn("delete_artist").tag("name", name)
        try:
            self.s.delete_artist(name)
        except errors.ValidationFailure as err:
            return 400, None, err
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 201, None, None


class Service:
    def __init__(self, db: "DB", err: errors.Struct):
        self.db = db
        self.err = err

    def get_artists(self) -> List[Artist]:
        e = self.err.fn("get_artists")
        try:
            return self.db.get("")
        except errors.Chain as err:
            raise e.wrap(err, "getting artists from db") from err

    def get_artist_by_name(self, name: str) -> Optional[Artist]:
        e = self.err.fn("get_artist_by_name").tag("name", name)
        if not name:
            return None
        try:
            artists = self.db.get(name)
        except errors.Chain as err:
            raise e.wrap(err, "getting artist from db") from err
        if len(artists) != 1:
            return None
        return artists[0]

    def save_artist(self, artist: Artist):
        e = self.err.fn("save_artist").tag("name", artist.name)
        if not artist.name:
            raise e.invalid("artist has no name")
        try:
            self.db.create(artist)
        except errors.Chain as err:
            raise e.wrap(err, "saving artist") from err

    def delete_artist(self, name: str):
        e = self.err.fn("delete_artist").tag("name", name)
        if not name:
            raise e.invalid("artist has no name")
        try:
            self.db.delete(name)
        except errors.Chain as err:
            raise e.wrap(err, "deleting artist") from err


class DB:
    def __init__(self, sql: Querier, err: errors.Struct):
        self.sql = sql
        self.err = err

    def get(self, name: str) -> List[Artist]:
        e = self.err.fn("get").tag("name", name)
        query = "SELECT id, name FROM artists "
        try:
            if name:
                rows = self.sql.query(query + "WHERE name = ? LIMIT 1", name)
            else:
                rows = self.sql.query(query)
            with rows:
                return [Artist.from_row(row) for row in rows]
        except SQLAlchemyError as err:
            raise e.db(err, "querying artists from table") from err

    def create(self, artist: Artist):
        e = self.err.fn("create")
        try:
            self.sql.exec("INSERT INTO artists (name) VALUES (?)", artist.name)
        except SQLAlchemyError as err:
            raise e.db(err, "inserting") from err

    def delete(self, name: str):
        e = self.err.fn("delete")
        try:
            self.sql.exec("DELETE FROM artists WHERE name = ?", name)
        except SQLAlchemyError as err:
            raise e.db(err, "deleting") from err

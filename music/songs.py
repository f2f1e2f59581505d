import logging
from typing import List, Optional

import flask
from sqlalchemy.exc import SQLAlchemyError

from . import errors
from .persist import Querier
from .types import Song
from .web import Context, controller

L = logging.getLogger("music.songs")


def new(sql: Querier):
    """Returns the songs Service and an API exposing it over HTTP."""
    e = errors.pkg("songs", L)
    s = Service(DB(sql, e.struct("db")), e.struct("service"))
    return s, API(s, e.struct("api"))


def blueprint(api: "API") -> flask.Blueprint:
    bp = flask.Blueprint("songs", __name__, url_prefix="/songs")
    bp.add_url_rule("", "get_songs", controller(api.get_songs), methods=["GET"])
    bp.add_url_rule("/<name>", "get_song_by_name", controller(api.get_song_by_name), methods=["GET"])
    bp.add_url_rule("/<name>", "create_song", controller(api.create_song), methods=["POST"])
    bp.add_url_rule("/<name>", "update_song", controller(api.update_song), methods=["PUT"])
    bp.add_url_rule("/<name>", "delete_song", controller(api.delete_song), methods=["DELETE"])
    return bp


class API:
    def __init__(self, s: "Service", err: errors.Struct):
        self.s = s
        self.err = err

    def get_songs(self, c: Context):
        e = self.err.fn("get_songs")
        try:
            songs = self.s.get_songs()
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 200, [song.json() for song in songs], None

    def get_song_by_name(self, c: Context):
        name = c.param("name")
        e = self.err.fn("get_song_by_name").tag("name", name)
        try:
            song = self.s.get_song_by_name(name)
        except errors.Chain as err:
            return 500, None, e.uk(err)
        if song is None:
            return 404, None, e.not_found()
        return 200, song.json(), None

    def _bind(self, c: Context, e: errors.Function):
        try:
            song = c.bind_json(Song)
        except ValueError as err:
            raise e.json(err, "binding") from err
        name = c.param("name")
        if not song.name:
            song.name = name
        return song

    def _save(self, c: Context, e: errors.Function):
        try:
            song = self._bind(c, e)
        except errors.ValidationFailure as err:
            return 400, None, err
        try:
            self.s.save_song(song)
        except errors.ValidationFailure as err:
            return 400, None, e.wrap(err, "saving song")
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 201, None, None

    def create_song(self, c: Context):
        return self._save(c, self.err.fn("create_song").tag("name", c.param("name")))

    def update_song(self, c: Context):
        return self._save(c, self.err.fn("update_song").tag("name", c.param("name")))

    def delete_song(self, c: Context):
        name = c.param("name")
        e = self.err.fn("delete_song").tag("name", name)
        try:
            self.s.delete_song(name)
        except errors.ValidationFailure as err:
            return 400, None, err
        except errors.Chain as err:
            return 500, None, e.uk(err)
        return 201, None, None


class Service:
    def __init__(self, db: "DB", err: errors.Struct):
        self.db = db
        self.err = err

    def get_songs(self) -> List[Song]:
        e = self.err.fn("get_songs")
        try:
            return self.db.get("")
        except errors.Chain as err:
            raise e.wrap(err, "getting songs from db") from err

    def get_song_by_name(self, name: str) -> Optional[Song]:
        """Returns None unless exactly one song has this name."""
        e = self.err.fn("get_song_by_name").tag("name", name)
        if not name:
            return None
        try:
            songs = self.db.get(name)
        except errors.Chain as err:
            raise e.wrap(err, "getting song from db") from err
        if len(songs) != 1:
            return None
        return songs[0]

    def save_song(self, song: Song):
        """Updates the song with this name if there is one, otherwise inserts it."""
        e = self.err.fn("save_song").tag("name", song.name)
        if not song.name:
            raise e.invalid("song has no name")
        try:
            existing = self.get_song_by_name(song.name)
        except errors.Chain as err:
            raise e.wrap(err, "getting song") from err
        try:
            if existing is not None:
                self.db.update(song)
            else:
                self.db.create(song)
        except errors.Chain as err:
            raise e.wrap(err, "saving song") from err

    def delete_song(self, name: str):
        e = self.err.fn("delete_song").tag("name", name)
        if not name:
            raise e.invalid("song has no name")
        try:
            self.db.delete(name)
        except errors.Chain as err:
            raise e.wrap(err, "deleting song") from err


class DB:
    def __init__(self, sql: Querier, err: errors.Struct):
        self.sql = sql
        self.err = err

    def get(self, name: str) -> List[Song]:
        e = self.err.fn("get").tag("name", name)
        query = "SELECT id, name, duration, artist_id FROM songs "
        try:
            if name:
                rows = self.sql.query(query + "WHERE name = ? LIMIT 1", name)
            else:
                rows = self.sql.query(query)
            with rows:
                return [Song.from_row(row) for row in rows]
        except SQLAlchemyError as err:
            raise e.db(err, "querying songs from table") from err

    def create(self, song: Song):
        e = self.err.fn("create")
        query = "INSERT INTO songs (name, duration, artist_id) VALUES (?, ?, ?)"
        try:
            self.sql.exec(query, song.name, song.duration, song.artist_id)
        except SQLAlchemyError as err:
            raise e.db(err, "inserting") from err

    def update(self, song: Song):
        e = self.err.fn("update")
        query = "UPDATE songs SET duration = ?, artist_id = ? WHERE name = ?"
        try:
            self.sql.exec(query, song.duration, song.artist_id, song.name)
        except SQLAlchemyError as err:
            raise e.db(err, "updating") from err

    def delete(self, name: str):
        e = self.err.fn("delete")
        query = "DELETE FROM songs WHERE name = ?"
        try:
            self.sql.exec(query, name)
        except SQLAlchemyError as err:
            raise e.db(err, "deleting") from err

import pytest

from . import errors


def fn(pkg, strct, name):
    return errors.pkg(pkg).struct(strct).fn(name)


def test_render_concatenates_every_link():
    db = fn("songs", "db", "get").tag("name", "Imagine")
    svc = fn("songs", "service", "get_song_by_name").tag("name", "Imagine")
    api = fn("songs", "api", "get_song_by_name").tag("name", "Imagine")

    err = api.uk(svc.wrap(db.db(ValueError("no such table: songs"), "querying"), "getting song"))

    assert str(err) == (
        "ERROR no such table: songs"
        " | CONTEXT  <- getting song <- querying"
        " | TAGS: name->Imagine"
        " | STACK: songs.api.get_song_by_name <- songs.service.get_song_by_name <- songs.db.get"
    )
    assert err.external == "unknown error"


def test_external_comes_from_the_leaf():
    db = fn("songs", "db", "create")
    svc = fn("songs", "service", "save_song")

    err = svc.wrap(db.db(RuntimeError("duplicate key value"), "inserting"), "saving song")

    assert err.external == "problem in database"
    assert errors.external(err) == "problem in database"
    assert "duplicate key" not in err.external


def test_tags_keep_first_position_and_deepest_value():
    outer = fn("a", "b", "outer").tag("name", "x").tag("id", 1)
    inner = fn("a", "b", "inner").tag("id", 2).tag("table", "songs")

    err = outer.wrap(inner.new("boom"), "outer ctx")

    assert err.tags() == [("name", "x"), ("id", 2), ("table", "songs")]
    assert "TAGS: name->x, id->2, table->songs" in str(err)


def test_not_found():
    e = fn("artists", "api", "get_artist_by_name")
    err = e.not_found()
    assert str(err) == (
        "ERROR not found | CONTEXT  <- not found | TAGS:  "
        "| STACK: artists.api.get_artist_by_name <- artists.api.get_artist_by_name"
    )
    assert err.external == "resource not found"


def test_wrap():
    e = fn("songs", "db", "get")
    assert e.wrap(None, "nothing") is None

    err = e.wrap(KeyError("id"), "row %d of %s", 3, "songs")
    assert err.ctx == "row 3 of songs"
    assert err.origin.args == ("id",)
    assert err.external == ""


def test_uk_without_an_error():
    err = fn("songs", "api", "get_songs").uk(None)
    assert str(err).startswith("ERROR unknown error | ")
    assert err.external == "unknown error"


@pytest.mark.parametrize('make,kind,external', [
    (lambda e: e.invalid("song has no name"), errors.ValidationFailure, "invalid data sent"),
    (lambda e: e.json(ValueError("expected a JSON object"), "binding"), errors.ValidationFailure, "invalid json"),
    (lambda e: e.db(RuntimeError("gone"), "querying"), errors.TransportFailure, "problem in database"),
])
def test_failure_kind_survives_wrapping(make, kind, external):
    leaf = make(fn("songs", "db", "get"))
    err = fn("songs", "service", "save_song").wrap(leaf, "saving song")

    assert isinstance(leaf, kind)
    assert isinstance(err, kind)
    assert err.external == external


def test_uk_and_not_found_are_plain_chains():
    e = fn("songs", "api", "create_song")
    assert type(e.uk(e.db(RuntimeError("gone")))) is errors.Chain
    assert type(e.not_found()) is errors.Chain


def test_tag_returns_a_new_handle():
    base = fn("songs", "db", "get")
    tagged = base.tag("name", "Imagine")
    assert base.tags == ()
    assert tagged.tags == (("name", "Imagine"),)
    assert tagged.label == "songs.db.get"


def test_original_error():
    e = fn("songs", "db", "get")
    err = e.wrap(e.db(ValueError("connection refused"), "querying"), "getting songs")
    assert errors.original_error(err) == "connection refused"
    assert errors.original_error(ValueError("plain")) == "plain"


def test_external_of_anything_else():
    assert errors.external(ValueError("secret")) == "unknown error"
    assert errors.external(fn("a", "b", "c").new("no external")) == "unknown error"


def test_raise_from_links_tracebacks():
    e = fn("songs", "db", "get")
    cause = ValueError("boom")
    with pytest.raises(errors.TransportFailure) as info:
        try:
            raise cause
        except ValueError as err:
            raise e.db(err, "querying") from err
    assert info.value.__cause__ is cause
    assert info.value.pkg.name == "songs"
    assert info.value.strct.name == "db"

import sqlalchemy as sa

from ..database import Base


class Song(Base):
    __tablename__ = "songs"
    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.Text, nullable=False)
    duration = sa.Column(sa.Text)
    # not a foreign key, artists are never checked on write
    artist_id = sa.Column(sa.Integer)

    @classmethod
    def from_row(cls, row):
        return cls(id=row.id, name=row.name, duration=row.duration, artist_id=row.artist_id)

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        name = data.get("name", "")
        duration = data.get("duration", "")
        artist_id = data.get("artistId", 0)
        if not isinstance(name, str):
            raise ValueError("name must be a string")
        if not isinstance(duration, str):
            raise ValueError("duration must be a string")
        if isinstance(artist_id, bool) or not isinstance(artist_id, int):
            raise ValueError("artistId must be an integer")
        if not -2 ** 31 <= artist_id < 2 ** 31:
            raise ValueError("artistId out of range")
        return cls(name=name, duration=duration, artist_id=artist_id)

    def json(self):
        return dict(
            id=self.id,
            name=self.name,
            duration=self.duration,
            artistId=self.artist_id,
        )

    def __str__(self):
        return f"{self.name} ({self.duration}) by artist {self.artist_id}"

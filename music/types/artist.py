import sqlalchemy as sa

from ..database import Base


class Artist(Base):
    __tablename__ = "artists"
    id = sa.Column(sa.Integer, primary_key=True)
    name = sa.Column(sa.Text, nullable=False)

    @classmethod
    def from_row(cls, row):
        return cls(id=row.id, name=row.name)

    @classmethod
    def from_json(cls, data):
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError("name must be a string")
        return cls(name=name)

    def json(self):
        return dict(id=self.id, name=self.name)

    def __str__(self):
        return self.name

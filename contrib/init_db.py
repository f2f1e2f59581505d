#!/usr/bin/env python3

from music import config
from music.database import create
from music.persist import Conn

conn = Conn.from_config(config.load())
conn.engine.echo = True
create(conn.engine)

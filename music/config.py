import configparser
import os
from typing import NamedTuple

CONFIG_PATHS = ['/etc/music/api.conf', 'music-api.conf']


class Config(NamedTuple):
    productive: bool
    job: bool
    port: int
    scope: str
    app_version: str
    db_user: str
    db_pass: str
    db_host: str
    db_name: str
    # a full SQLAlchemy URL, wins over the db_* fields when set
    db_url: str = ""
    pool_size: int = 5

    @property
    def dsn(self) -> str:
        if self.db_url:
            return self.db_url
        return f"postgresql://{self.db_user}:{self.db_pass}@{self.db_host}/{self.db_name}"


def load(environ=None, paths=CONFIG_PATHS) -> Config:
    """
    Picks a profile from $SCOPE (production, test, anything else is local) and
    applies whatever the config files in `paths` override.
    """
    environ = os.environ if environ is None else environ
    scope, ver = environ.get("SCOPE", ""), environ.get("VERSION", "")
    job = False
    if scope.startswith("job"):
        scope = "production"
        job = True
    if scope == "production":
        cfg = Config(True, job, 8080, "production", ver,
                     "music", "", "db:5432", "music")
    elif scope == "test":
        cfg = Config(False, job, 8080, "test", ver,
                     "test", "test", "127.0.0.1:5432", "music_test")
    else:
        cfg = Config(False, job, 3000, "local", "local",
                     "root", "root", "127.0.0.1:5432", "music")
    return override(cfg, paths)


def override(cfg: Config, paths) -> Config:
    config = configparser.ConfigParser()
    config.read(paths)
    changes = {}
    if config.has_section('server'):
        changes['port'] = config['server'].getint('port', cfg.port)
    if config.has_section('database'):
        cfg_db: configparser.SectionProxy = config['database']
        changes['db_user'] = cfg_db.get('user', cfg.db_user)
        changes['db_pass'] = cfg_db.get('password', cfg.db_pass)
        host = cfg_db.get('host', cfg.db_host)
        if 'port' in cfg_db:
            host = host.rsplit(':', 1)[0] + ':' + str(cfg_db.getint('port'))
        changes['db_host'] = host
        changes['db_name'] = cfg_db.get('name', cfg.db_name)
        changes['db_url'] = cfg_db.get('url', cfg.db_url)
    if config.has_section('pool'):
        changes['pool_size'] = config['pool'].getint('size', cfg.pool_size)
    return cfg._replace(**changes)

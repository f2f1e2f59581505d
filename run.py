import logging
import os

from gevent import pywsgi

from music import config, logs
from music.app import create_app

cfg = config.load()
logs.setup(cfg)
app = create_app(cfg)
app.debug = os.environ.get('FLASK_DEBUG', '0') == '1'

logs.info(logging.getLogger("music"), "Starting up API", scope=cfg.scope, port=cfg.port)
server = pywsgi.WSGIServer(('', cfg.port), app)
server.serve_forever()

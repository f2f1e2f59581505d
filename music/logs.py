import json
import logging
import sys

FORMAT = "[%(asctime)s] %(levelname)s: %(filename)s:%(funcName)s(%(lineno)s): %(message)s"


class TextFormatter(logging.Formatter):
    def format(self, record):
        line = super().format(record)
        fields = getattr(record, "fields", None)
        if fields:
            line += " " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class JSONFormatter(logging.Formatter):
    def format(self, record):
        doc = dict(
            time=self.formatTime(record),
            level=record.levelname.lower(),
            logger=record.name,
            msg=record.getMessage(),
        )
        doc.update(getattr(record, "fields", None) or {})
        if record.exc_info:
            doc["exc"] = self.formatException(record.exc_info)
        return json.dumps(doc, ensure_ascii=False, default=str)


def setup(cfg) -> logging.Logger:
    """
    Sends everything under the `music` logger to stdout: debug and text in local
    and test, info and JSON in production.
    """
    logger = logging.getLogger("music")
    level = logging.INFO if cfg.productive else logging.DEBUG
    logger.setLevel(level)
    for h in list(logger.handlers):
        logger.removeHandler(h)

    sh = logging.StreamHandler(sys.stdout)
    sh.setLevel(level)
    sh.setFormatter(JSONFormatter() if cfg.productive else TextFormatter(FORMAT))
    logger.addHandler(sh)
    return logger


def info(logger: logging.Logger, title: str, **fields):
    logger.info(title, extra={"fields": fields}, stacklevel=2)


def debug(logger: logging.Logger, title: str, **fields):
    logger.debug(title, extra={"fields": fields}, stacklevel=2)

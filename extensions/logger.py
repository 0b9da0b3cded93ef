# extensions/logger.py
import os, sys, logging, json, uuid, time
from logging.handlers import RotatingFileHandler
from flask import g, has_request_context, request

_REQUEST_ID_KEY = "request_id"


class JsonFormatter(logging.Formatter):
    def __init__(self, app_name: str = "ms-system"):
        super().__init__()
        self.app_name = app_name

    def format(self, record):
        data = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "app": self.app_name,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "request_id"):
            data["request_id"] = record.request_id
        if hasattr(record, "user_id"):
            data["user_id"] = record.user_id
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


class RequestIdFilter(logging.Filter):
    def filter(self, record):
        if has_request_context():
            record.request_id = getattr(g, _REQUEST_ID_KEY, "-")
            principal = getattr(g, "current_user", None)
            if principal is not None:
                record.user_id = principal.id
        else:
            record.request_id = "-"
        return True


def _ensure_request_id():
    if not hasattr(g, _REQUEST_ID_KEY):
        incoming = request.headers.get("X-Request-ID")
        setattr(g, _REQUEST_ID_KEY, incoming or uuid.uuid4().hex)
    return getattr(g, _REQUEST_ID_KEY)


def _configure_root(cfg):
    level = getattr(logging, str(cfg["LOG_LEVEL"]).upper(), logging.INFO)
    root = logging.getLogger()
    # 进程内只配置一次（测试里会多次 create_app）
    if getattr(root, "_ms_configured", False):
        return
    root.setLevel(level)

    text_fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(request_id)s | %(name)s | %(message)s",
        "%Y-%m-%d %H:%M:%S"
    )
    json_fmt = JsonFormatter(cfg.get("APP_NAME", "ms-system"))
    formatter = json_fmt if cfg["LOG_JSON"] else text_fmt

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    console.addFilter(RequestIdFilter())
    root.addHandler(console)

    if cfg.get("LOG_TO_FILE", True):
        log_dir = cfg["LOG_DIR"]
        os.makedirs(log_dir, exist_ok=True)

        def make_handler(filename, lvl=None):
            h = RotatingFileHandler(
                os.path.join(log_dir, filename),
                maxBytes=cfg["LOG_MAX_BYTES"],
                backupCount=cfg["LOG_BACKUP_COUNT"],
                encoding="utf-8"
            )
            h.setLevel(lvl or level)
            h.setFormatter(formatter)
            h.addFilter(RequestIdFilter())
            return h

        root.addHandler(make_handler("app.log"))
        root.addHandler(make_handler("error.log", logging.ERROR))

    # 降低 noisy 包
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    root._ms_configured = True


def init_logger(app):
    _configure_root(app.config)
    app.logger.info("Logger initialized (env=%s)", app.config.get("APP_ENV"))

    # 请求钩子每个 app 实例都要注册
    @app.before_request
    def _before():
        g._req_start = time.time()
        _ensure_request_id()
        app.logger.info("REQ %s %s from %s", request.method, request.path, request.remote_addr)

    @app.after_request
    def _after(resp):
        duration = (time.time() - getattr(g, "_req_start", time.time())) * 1000
        resp.headers["X-Request-ID"] = _ensure_request_id()
        app.logger.info("RESP %s %s %s %.1fms", request.method, request.path, resp.status_code, duration)
        return resp

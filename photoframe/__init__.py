from flask import Flask

from photoframe import config
from photoframe.utils.merge_utils import ImageMerger


def create_app(overrides=None):
    app = Flask(__name__)
    app.config.update(
        FETCH_TIMEOUT=config.PHOTOFRAME_FETCH_TIMEOUT,
        ALLOW_LOCAL_SOURCES=config.PHOTOFRAME_ALLOW_LOCAL_SOURCES,
        OUTPUT_FORMAT=config.PHOTOFRAME_OUTPUT_FORMAT,
    )
    if overrides:
        app.config.update(overrides)

    from photoframe.routes import main_bp
    app.register_blueprint(main_bp)
    return app


__all__ = ["create_app", "ImageMerger"]

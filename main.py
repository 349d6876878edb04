"""WSGI entrypoint for the recipe book.

Local development can use ``flask --app main run``; production servers such
as Gunicorn import the ``app`` object defined below. Configuration is read
from the environment (see :class:`recipebook.config.Settings`).
"""

from recipebook import create_app
from recipebook.config import Settings
from recipebook.logs import setup_logging

settings = Settings.from_env()
setup_logging(settings.log_level)

app = create_app(settings=settings)


__all__ = ["app"]

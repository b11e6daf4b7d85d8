from __future__ import annotations

import logging
from logging.config import dictConfig

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "openai", "websockets")


def configure_logging(level: int | str = logging.INFO) -> None:
	loggers = {
		"": {"handlers": ["console"], "level": level},
		"uvicorn": {"handlers": ["console"], "level": level, "propagate": False},
		"uvicorn.access": {"handlers": ["access"], "level": level, "propagate": False},
	}
	for name in NOISY_LOGGERS:
		loggers[name] = {"level": logging.WARNING}

	dictConfig(
		{
			"version": 1,
			"disable_existing_loggers": False,
			"formatters": {
				"standard": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
				"access": {"format": "%(asctime)s ACCESS %(message)s"},
			},
			"handlers": {
				"console": {
					"class": "logging.StreamHandler",
					"formatter": "standard",
					"level": level,
				},
				"access": {
					"class": "logging.StreamHandler",
					"formatter": "access",
					"level": level,
				},
			},
			"loggers": loggers,
		}
	)

from logging.config import dictConfig

from topup import config


def setup_logging():
    logging_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
        },
        'handlers': {
            'default': {
                'level': 'DEBUG',
                'formatter': 'standard',
                'class': 'logging.StreamHandler',
            },
        },
        'loggers': {
            '': {
                'handlers': ['default'],
                'level': config.LOG_LEVEL,
                'propagate': True
            },
            'sqlalchemy.engine': {
                'level': 'WARNING',
                'propagate': True
            },
        }
    }

    dictConfig(logging_config)

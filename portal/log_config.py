# portal/log_config.py
import logging.config

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'detailed': {
            'format': '{asctime} {levelname} [{name}:{lineno}] {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'level': 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'detailed',
        },
    },
    'loggers': {
        'portal': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        'werkzeug': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}


def configure_logging(level=None):
    config = dict(LOGGING)
    if level:
        config['loggers'] = dict(LOGGING['loggers'])
        config['loggers']['portal'] = dict(LOGGING['loggers']['portal'], level=level)
    logging.config.dictConfig(config)

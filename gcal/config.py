r"""Per-user storage locations and the small JSON config file

Layout under the app directory (~/.config/gcal, %APPDATA%\gcal on
Windows, or $GCAL_HOME):

    config.json          {"lastUser": ..., "timezone": ...}
    credentials.json     OAuth client secrets
    data/<user>/         token.json, token-write.json
"""
import json
import logging
import os
import re
import sys
from collections import namedtuple
from os.path import expanduser, isdir, join

logger = logging.getLogger('gcal')

UserPaths = namedtuple('UserPaths', ['user_dir', 'token_file',
                                     'token_write_file'])


def get_app_dir():
    if os.environ.get('GCAL_HOME'):
        return os.environ['GCAL_HOME']
    if sys.platform == 'win32':
        return join(os.environ.get('APPDATA') or expanduser('~'), 'gcal')
    return join(expanduser('~'), '.config', 'gcal')


def get_data_dir():
    return join(get_app_dir(), 'data')


def get_config_file():
    return join(get_app_dir(), 'config.json')


def get_credentials_file():
    return join(get_app_dir(), 'credentials.json')


def load_config():
    path = get_config_file()
    if not os.path.isfile(path):
        return {}
    try:
        with open(path) as fp:
            return json.load(fp)
    except ValueError as exc:
        raise ValueError(f'Failed to parse {path}: {exc}')


def save_config(config):
    os.makedirs(get_app_dir(), exist_ok=True)
    with open(get_config_file(), 'w') as fp:
        json.dump(config, fp, indent=2)


def normalize_user(user):
    r"""Reduce an email address to a directory friendly user name

    "Bob.Smith+cal@gmail.com" becomes "bobsmith"
    """
    return re.split(r'[+@]', user.lower())[0].replace('.', '')


def get_user_paths(user):
    user_dir = join(get_data_dir(), user)
    return UserPaths(user_dir=user_dir,
                     token_file=join(user_dir, 'token.json'),
                     token_write_file=join(user_dir, 'token-write.json'))


def ensure_user_dir(user):
    paths = get_user_paths(user)
    if not isdir(paths.user_dir):
        os.makedirs(paths.user_dir)
        logger.debug('Created %s', paths.user_dir)
    return paths


def set_default_user(user):
    r"""Remember user for later invocations

    Returns
    -------
    string : the normalized user name
    """
    normalized = normalize_user(user)
    config = load_config()
    config['lastUser'] = normalized
    save_config(config)
    return normalized


def resolve_user(cli_user=None):
    r"""User given on the command line, else the saved default

    Returns
    -------
    string (empty if no user is known)
    """
    if cli_user:
        return normalize_user(cli_user)
    return load_config().get('lastUser', '')

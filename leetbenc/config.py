'''
A module that stores the decoder defaults.
Values come from config.ini shipped with the package and can be overridden
by config.ini in the current folder.
'''

import os
import logging
import configparser
from configparser import ConfigParser

SECTION = 'DECODER'
DEFAULTS = {
    SECTION: {
        'MaxDepth': '256',
        'DuplicateKeys': 'last',
        'SortedKeys': 'no'
    }
}
DUPLICATE_POLICIES = ('last', 'error')
CONFIG_PATHS = [
    os.path.join(os.path.dirname(os.path.abspath(__file__)), 'config.ini'),
    'config.ini'
]

def read_files(paths):
    '''
    Read config files one by one. A file that can't be parsed is skipped.
    '''
    config = ConfigParser(interpolation=None)
    config.read_dict(DEFAULTS)
    for path in paths:
        single = ConfigParser(interpolation=None)
        try:
            single.read(path, encoding='utf-8')
        except (configparser.Error, UnicodeDecodeError) as error:
            logging.warning('Skipping config file {}: {}'.format(path, error))
            continue
        config.read_dict(single)
    return config

def load_config(paths):
    '''
    Read given config files. Return (max_depth, duplicate_keys, sorted_keys).
    '''
    config = read_files(paths)
    section = config[SECTION]
    try:
        max_depth = section.getint('MaxDepth')
        if max_depth < 1:
            raise ValueError(max_depth)
    except ValueError:
        logging.warning('Bad MaxDepth value {!r} in config, using {}.'.format(
            section['MaxDepth'], DEFAULTS[SECTION]['MaxDepth']))
        max_depth = int(DEFAULTS[SECTION]['MaxDepth'])
    duplicate_keys = section['DuplicateKeys'].strip().lower()
    if duplicate_keys not in DUPLICATE_POLICIES:
        logging.warning('Bad DuplicateKeys value {!r} in config, using {}.'.format(
            duplicate_keys, DEFAULTS[SECTION]['DuplicateKeys']))
        duplicate_keys = DEFAULTS[SECTION]['DuplicateKeys']
    try:
        sorted_keys = section.getboolean('SortedKeys')
    except ValueError:
        logging.warning('Bad SortedKeys value {!r} in config, using {}.'.format(
            section['SortedKeys'], DEFAULTS[SECTION]['SortedKeys']))
        sorted_keys = False
    return max_depth, duplicate_keys, sorted_keys

MAX_DEPTH, DUPLICATE_KEYS, SORTED_KEYS = load_config(CONFIG_PATHS)

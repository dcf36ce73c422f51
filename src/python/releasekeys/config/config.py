# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import configparser
import os


class Config(object):
  """Encapsulates ini-style signing config file loading and access."""

  _TRUE_VALUES = ('1', 'true', 'yes', 'on')
  _FALSE_VALUES = ('0', 'false', 'no', 'off')

  class ConfigError(Exception):
    """Indicates a missing, unreadable or invalid signing config."""

  @staticmethod
  def create_parser(seed_values=None):
    """Create a config parser that supports %([key-name])s value substitution.

    The keys 'buildroot' and 'homedir' are always seeded; values passed in seed_values win.

    :param dict seed_values: Extra values available for substitution.
    """
    all_seed_values = {
      'buildroot': os.getcwd(),
      'homedir': os.path.expanduser('~'),
    }
    all_seed_values.update(seed_values or {})
    return configparser.ConfigParser(all_seed_values)

  @classmethod
  def load(cls, configpath, seed_values=None):
    """Load the config file at configpath and return a SingleFileConfig for it.

    :raises: ``Config.ConfigError`` if the file cannot be read or parsed.
    """
    parser = cls.create_parser(seed_values)
    try:
      with open(configpath, 'r', encoding='utf-8') as ini:
        parser.read_file(ini)
    except (IOError, OSError, UnicodeDecodeError) as e:
      raise cls.ConfigError('Failed to read config file {0}: {1}'.format(configpath, e))
    except configparser.Error as e:
      raise cls.ConfigError('Failed to parse config file {0}: {1}'.format(configpath, e))
    return SingleFileConfig(configpath, parser)

  def get_option(self, option):
    """Return the value of a ``ConfigOption.Option``, falling back to its default."""
    return self.get(option.section, option.option, type_=option.valtype, default=option.default)

  def getbool(self, section, option, default=None):
    return self.get(section, option, type_=bool, default=default)

  def get(self, section, option, type_=str, default=None):
    """Return the value of section.option converted to type_, or default if it is not defined."""
    if not self.has_option(section, option):
      return default
    return self._convert(section, option, self._get_value(section, option), type_)

  def get_required(self, section, option, type_=str):
    """Return the value of section.option or raise if it is missing.

    An empty value counts as missing.
    """
    if not self.has_option(section, option):
      raise self.ConfigError('Required option {0}.{1} is not defined.'.format(section, option))
    raw_value = self._get_value(section, option)
    if not raw_value.strip():
      raise self.ConfigError('Required option {0}.{1} is empty.'.format(section, option))
    return self._convert(section, option, raw_value, type_)

  def _convert(self, section, option, raw_value, type_):
    if type_ is bool:
      lowered = raw_value.strip().lower()
      if lowered in self._TRUE_VALUES:
        return True
      if lowered in self._FALSE_VALUES:
        return False
      raise self.ConfigError('Option {0}.{1} must be a boolean, got: {2}'
                             .format(section, option, raw_value))
    try:
      return type_(raw_value)
    except ValueError as e:
      raise self.ConfigError('Option {0}.{1} is not a valid {2}: {3}'
                             .format(section, option, type_.__name__, e))

  def has_option(self, section, option):
    raise NotImplementedError()

  def _get_value(self, section, option):
    raise NotImplementedError()


class SingleFileConfig(Config):
  """Config read from a single ini file."""

  def __init__(self, configpath, config):
    super(SingleFileConfig, self).__init__()
    self.configpath = configpath
    self.configparser = config

  def sources(self):
    return [self.configpath]

  def sections(self):
    return self.configparser.sections()

  def has_option(self, section, option):
    return self.configparser.has_option(section, option)

  def _get_value(self, section, option):
    try:
      return self.configparser.get(section, option)
    except configparser.InterpolationError as e:
      raise self.ConfigError('Failed to interpolate {0}.{1} in {2}: {3}'
                             .format(section, option, self.configpath, e))

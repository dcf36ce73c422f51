# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import os

from releasekeys.config.config import Config
from releasekeys.config.config_option import ConfigOption


_SECTION = 'signing'

MODE = ConfigOption.create(
  section=_SECTION,
  option='mode',
  help="Where release keystore credentials come from. One of (environment, properties).",
  default='properties')

PROPERTIES_FILE = ConfigOption.create(
  section=_SECTION,
  option='properties_file',
  help='Path to the key.properties file, relative to the app module. '
       'Defaults to key.properties one directory above the app module.',
  default=None)

ENV_LAYOUT = ConfigOption.create(
  section=_SECTION,
  option='env_layout',
  help='Names the set of environment variables read in environment mode. One of (legacy, android).',
  default='android')

KEYSTORE_FILE = ConfigOption.create(
  section=_SECTION,
  option='keystore_file',
  help='Keystore path relative to the project root, for layouts that do not read it from the '
       'environment.',
  default=None)


class EnvironmentLayout(object):
  """The environment variables a CI system sets to hand over release keystore credentials."""

  def __init__(self,
               name,
               store_file_var,
               store_password_var,
               key_alias_var,
               key_password_var,
               keystore_file=None):
    """
    :param string name: Name used to select this layout from config.
    :param string store_file_var: Variable holding the keystore path, or None to use keystore_file.
    :param string store_password_var: Variable holding the keystore password.
    :param string key_alias_var: Variable holding the key alias.
    :param string key_password_var: Variable holding the key password.
    :param string keystore_file: Keystore path relative to the project root.
    """
    for var in (store_password_var, key_alias_var, key_password_var):
      if not var:
        raise ValueError('Layout {0} must name a variable for each credential.'.format(name))
    if not store_file_var and not keystore_file:
      raise ValueError('Layout {0} needs either a store file variable or a fixed keystore_file.'
                       .format(name))
    self.name = name
    self.store_file_var = store_file_var
    self.store_password_var = store_password_var
    self.key_alias_var = key_alias_var
    self.key_password_var = key_password_var
    self.keystore_file = keystore_file

  @classmethod
  def named(cls, name):
    """Return the preset layout called name."""
    try:
      return _PRESET_LAYOUTS[name]
    except KeyError:
      raise ValueError('Unknown environment layout: {0}. Expected one of ({1}).'
                       .format(name, ', '.join(sorted(_PRESET_LAYOUTS))))

  def variables(self):
    """Return the distinct variable names this layout reads, in declaration order."""
    names = []
    for var in (self.store_file_var, self.store_password_var, self.key_alias_var,
                self.key_password_var):
      if var and var not in names:
        names.append(var)
    return names

  def __repr__(self):
    return '{0}({1})'.format(self.__class__.__name__, self.name)


# KEY_PASSWORD unlocks both the store and the key, and KEY_PROPERTIES_PATH names the keystore.
LEGACY_LAYOUT = EnvironmentLayout('legacy',
                                  store_file_var='KEY_PROPERTIES_PATH',
                                  store_password_var='KEY_PASSWORD',
                                  key_alias_var='KEY_ALIAS',
                                  key_password_var='KEY_PASSWORD')

ANDROID_LAYOUT = EnvironmentLayout('android',
                                   store_file_var=None,
                                   store_password_var='ANDROID_KEYSTORE_PASSWORD',
                                   key_alias_var='ANDROID_KEY_ALIAS',
                                   key_password_var='ANDROID_KEY_PASSWORD',
                                   keystore_file=os.path.join('app', 'upload-keystore.jks'))

_PRESET_LAYOUTS = dict((layout.name, layout) for layout in (LEGACY_LAYOUT, ANDROID_LAYOUT))


class ResolutionMode(object):
  """Selects how the KeyResolver finds release credentials."""

  ENVIRONMENT = 'environment'
  PROPERTIES = 'properties'

  kind = None

  @classmethod
  def from_config(cls, config):
    """Build the mode described by the [signing] section of a Config.

    :raises: ``Config.ConfigError`` for an unknown mode or layout.
    """
    mode = (config.get_option(MODE) or '').strip().lower()
    if mode == cls.ENVIRONMENT:
      try:
        layout = EnvironmentLayout.named(config.get_option(ENV_LAYOUT))
      except ValueError as e:
        raise Config.ConfigError(str(e))
      return EnvironmentMode(layout, keystore_file=config.get_option(KEYSTORE_FILE) or None)
    if mode == cls.PROPERTIES:
      return PropertiesFileMode(config.get_option(PROPERTIES_FILE) or None)
    raise Config.ConfigError("The signing mode must be one of ({0}, {1}) instead of: '{2}'."
                             .format(cls.ENVIRONMENT, cls.PROPERTIES, mode))


class EnvironmentMode(ResolutionMode):
  """Read credentials from environment variables named by an EnvironmentLayout."""

  kind = ResolutionMode.ENVIRONMENT

  def __init__(self, layout=ANDROID_LAYOUT, keystore_file=None):
    """
    :param EnvironmentLayout layout: The variables to read.
    :param string keystore_file: Overrides the layout's fixed keystore path.
    """
    self.layout = layout
    self.keystore_file = keystore_file

  def __repr__(self):
    return '{0}(layout={1!r}, keystore_file={2!r})'.format(self.__class__.__name__, self.layout.name,
                                                           self.keystore_file)


class PropertiesFileMode(ResolutionMode):
  """Read credentials from a key.properties file."""

  kind = ResolutionMode.PROPERTIES

  def __init__(self, properties_file=None):
    """
    :param string properties_file: path/to/key.properties, relative paths are taken from the app
      module. None selects the default location.
    """
    self.properties_file = properties_file

  def __repr__(self):
    return '{0}(properties_file={1!r})'.format(self.__class__.__name__, self.properties_file)

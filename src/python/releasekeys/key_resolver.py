# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import logging
import os

from releasekeys.config.config_option import ConfigOption
from releasekeys.keystore import Keystore
from releasekeys.properties import PropertiesFile
from releasekeys.resolution_mode import EnvironmentMode, PropertiesFileMode, ResolutionMode


logger = logging.getLogger(__name__)


DEBUG_FALLBACK = ConfigOption.create(
  section='signing',
  option='debug_fallback',
  help='Sign release builds with the debug keystore when no release keystore resolves.',
  valtype=bool,
  default=False)


class Resolution(object):
  """The outcome of a keystore lookup: a Keystore or None, plus any warnings raised on the way."""

  def __init__(self, identity=None, warnings=None):
    self.identity = identity
    self.warnings = list(warnings or ())

  @property
  def found(self):
    return self.identity is not None

  def __repr__(self):
    return '{0}(identity={1!r}, warnings={2!r})'.format(self.__class__.__name__, self.identity,
                                                        self.warnings)


class KeyResolver(object):
  """Resolve the Keystore that signs a build, from the environment or a key.properties file."""

  class Error(Exception):
    """Indicates a keystore lookup that could not be carried out."""

  class MalformedCredentialsError(Error):
    """Indicates a key.properties file that is unreadable or lacks a credential."""

  class MissingCredentialFileWarning(UserWarning):
    """Reported when there is no key.properties file to read credentials from."""

  PROPERTIES_FILE_NAME = 'key.properties'

  STORE_FILE = 'storeFile'
  STORE_PASSWORD = 'storePassword'
  KEY_ALIAS = 'keyAlias'
  KEY_PASSWORD = 'keyPassword'
  REQUIRED_PROPERTIES = (STORE_FILE, STORE_PASSWORD, KEY_ALIAS, KEY_PASSWORD)

  def __init__(self, project_root, working_dir=None, environ=None, homedir=None):
    """
    :param string project_root: Directory that keystore paths are resolved against.
    :param string working_dir: The app module directory. Defaults to project_root.
    :param environ: Mapping used to look up environment variables. Defaults to os.environ.
    :param string homedir: Home directory holding the debug keystore. Defaults to the user's home.
    """
    self._project_root = project_root
    self._working_dir = working_dir or project_root
    self._environ = os.environ if environ is None else environ
    self._homedir = homedir

  @property
  def project_root(self):
    return self._project_root

  @property
  def working_dir(self):
    return self._working_dir

  def default_properties_file(self):
    """Return the key.properties location one directory above the app module."""
    return os.path.normpath(os.path.join(self._working_dir, os.pardir, self.PROPERTIES_FILE_NAME))

  def resolve(self, mode):
    """Return a Resolution holding the release Keystore described by mode.

    :param ResolutionMode mode: An EnvironmentMode or a PropertiesFileMode.
    :raises: ``KeyResolver.MalformedCredentialsError`` if a key.properties file exists but cannot
      supply all four credentials.
    """
    if isinstance(mode, EnvironmentMode):
      return self._resolve_from_environment(mode)
    if isinstance(mode, PropertiesFileMode):
      return self._resolve_from_properties(mode)
    raise self.Error('Unknown keystore resolution mode: {0!r}'.format(mode))

  def resolve_for_build(self, build_type, mode, debug_fallback=False):
    """Return a Resolution holding the Keystore that signs a build of type build_type.

    Debug builds always get the debug keystore. Release builds resolve mode, and when nothing is
    found fall back to the debug keystore only if debug_fallback is set.

    :param string build_type: One of (debug, release).
    :param ResolutionMode mode: How to find release credentials.
    :param bool debug_fallback: Sign release builds with the debug keystore if no release keystore
      resolves.
    """
    build_type = (build_type or '').lower()
    if build_type not in Keystore.BUILD_TYPES:
      raise ValueError("The 'build_type' must be one of (debug, release) instead of: '{0}'."
                       .format(build_type))
    if build_type == 'debug':
      return Resolution(Keystore.debug_keystore(self._homedir))

    resolution = self.resolve(mode)
    if not resolution.found and debug_fallback:
      logger.warning('No release keystore was resolved, signing the release build with the '
                     'debug keystore.')
      return Resolution(Keystore.debug_keystore(self._homedir), resolution.warnings)
    return resolution

  def resolve_from_config(self, config, build_type='release'):
    """Resolve the Keystore for build_type using the [signing] section of a Config."""
    mode = ResolutionMode.from_config(config)
    return self.resolve_for_build(build_type, mode,
                                  debug_fallback=config.get_option(DEBUG_FALLBACK))

  def _getenv(self, name):
    # An unset variable yields an empty credential.
    return self._environ.get(name) or ''

  def _resolve_from_environment(self, mode):
    layout = mode.layout
    logger.debug('Resolving release keystore from the {0} environment layout.'.format(layout.name))
    if layout.store_file_var:
      store_file = os.path.expanduser(self._getenv(layout.store_file_var))
      keystore_location = os.path.join(self._project_root, store_file) if store_file else ''
    else:
      keystore_file = os.path.expanduser(mode.keystore_file or layout.keystore_file)
      keystore_location = os.path.join(self._project_root, keystore_file)

    keystore = Keystore(keystore_location=keystore_location,
                        keystore_password=self._getenv(layout.store_password_var),
                        keystore_alias=self._getenv(layout.key_alias_var),
                        key_password=self._getenv(layout.key_password_var),
                        build_type='release')
    missing = keystore.missing_fields()
    if missing:
      logger.debug('Environment left these keystore fields empty: {0}'.format(', '.join(missing)))
    return Resolution(keystore)

  def _resolve_from_properties(self, mode):
    if mode.properties_file:
      properties_file = os.path.join(self._working_dir, os.path.expanduser(mode.properties_file))
    else:
      properties_file = self.default_properties_file()

    if not os.path.isfile(properties_file):
      message = ('No keystore properties file found at {0}, release builds will not be signed '
                 'with a release key.'.format(properties_file))
      logger.warning(message)
      return Resolution(None, [self.MissingCredentialFileWarning(message)])

    logger.debug('Resolving release keystore from {0}.'.format(properties_file))
    try:
      properties = PropertiesFile.parse(properties_file)
    except PropertiesFile.ParseError as e:
      raise self.MalformedCredentialsError(str(e))

    missing = [key for key in self.REQUIRED_PROPERTIES if not properties.get(key)]
    if missing:
      raise self.MalformedCredentialsError('Keystore properties file {0} is missing: {1}'
                                           .format(properties_file, ', '.join(missing)))

    store_file = os.path.expanduser(properties[self.STORE_FILE])
    return Resolution(Keystore(keystore_location=os.path.join(self._project_root, store_file),
                               keystore_password=properties[self.STORE_PASSWORD],
                               keystore_alias=properties[self.KEY_ALIAS],
                               key_password=properties[self.KEY_PASSWORD],
                               build_type='release'))

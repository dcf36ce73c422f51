# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import os


class Keystore(object):
  """Represents the signing identity of an Android package."""

  class UnusableKeystoreError(Exception):
    """Indicates a keystore that cannot be handed to a signing tool."""

  BUILD_TYPES = ('debug', 'release')

  DEBUG_KEYSTORE_ALIAS = 'androiddebugkey'
  DEBUG_KEYSTORE_PASSWORD = 'android'

  _CREDENTIAL_FIELDS = ('keystore_location', 'keystore_password', 'keystore_alias', 'key_password')

  @classmethod
  def debug_keystore(cls, homedir=None):
    """Return the keystore the Android tools generate for debug builds.

    :param string homedir: Home directory holding the .android dir. Defaults to the user's home.
    """
    homedir = homedir or os.path.expanduser('~')
    return cls(keystore_location=os.path.join(homedir, '.android', 'debug.keystore'),
               keystore_password=cls.DEBUG_KEYSTORE_PASSWORD,
               keystore_alias=cls.DEBUG_KEYSTORE_ALIAS,
               key_password=cls.DEBUG_KEYSTORE_PASSWORD,
               build_type='debug')

  def __init__(self,
               keystore_location=None,
               keystore_password=None,
               keystore_alias=None,
               key_password=None,
               build_type='release'):
    """
    :param string keystore_location: path/to/keystore.
    :param string keystore_password: The password for the keystore.
    :param string keystore_alias: The alias of the key within the keystore.
    :param string key_password: The password for the key.
    :param string build_type: What type of package the keystore signs. One of (debug, release).
    """
    # Unset values become empty strings.
    self.keystore_location = keystore_location or ''
    self.keystore_password = keystore_password or ''
    self.keystore_alias = keystore_alias or ''
    self.key_password = key_password or ''
    self.build_type = build_type

  @property
  def build_type(self):
    return self._build_type

  @build_type.setter
  def build_type(self, build_type):
    if not build_type or build_type.lower() not in self.BUILD_TYPES:
      raise ValueError("The 'build_type' must be one of (debug, release) instead of: '{0}'."
                       .format(build_type))
    self._build_type = build_type.lower()

  def missing_fields(self):
    """Return the names of the credential fields that are empty."""
    return [field for field in self._CREDENTIAL_FIELDS if not getattr(self, field)]

  def is_usable(self):
    return not self.missing_fields() and os.path.isfile(self.keystore_location)

  def validate(self):
    """Raise UnusableKeystoreError if this keystore cannot be used for signing."""
    problems = []
    missing = self.missing_fields()
    if missing:
      problems.append('missing values for: {0}'.format(', '.join(missing)))
    if self.keystore_location and not os.path.isfile(self.keystore_location):
      problems.append('no keystore file at: {0}'.format(self.keystore_location))
    if problems:
      raise self.UnusableKeystoreError('The {0} keystore is unusable, {1}.'
                                       .format(self.build_type, '; '.join(problems)))

  def __eq__(self, other):
    if not isinstance(other, Keystore):
      return NotImplemented
    return (self.build_type == other.build_type and
            all(getattr(self, field) == getattr(other, field) for field in self._CREDENTIAL_FIELDS))

  def __ne__(self, other):
    result = self.__eq__(other)
    return result if result is NotImplemented else not result

  __hash__ = None

  def __repr__(self):
    # Passwords stay out of build logs.
    return '{0}(build_type={1!r}, keystore_location={2!r}, keystore_alias={3!r})'.format(
      self.__class__.__name__, self.build_type, self.keystore_location, self.keystore_alias)

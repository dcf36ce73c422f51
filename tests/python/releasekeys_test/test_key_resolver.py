# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from contextlib import contextmanager
import os
import textwrap
import unittest

from releasekeys.key_resolver import KeyResolver, Resolution
from releasekeys.keystore import Keystore
from releasekeys.properties import PropertiesFile
from releasekeys.resolution_mode import (ANDROID_LAYOUT, LEGACY_LAYOUT, EnvironmentMode,
                                         PropertiesFileMode, ResolutionMode)
from releasekeys.util.contextutil import environment_as, temporary_dir
from releasekeys.util.dirutil import safe_mkdir, safe_open


class TestKeyResolver(unittest.TestCase):
  """Test the KeyResolver that produces the release Keystore for a build."""

  @contextmanager
  def project(self):
    """Yield (project_root, app_dir) of a throwaway flutter-style android project."""
    with temporary_dir() as root:
      app_dir = os.path.join(root, 'app')
      safe_mkdir(app_dir)
      yield root, app_dir

  def write_key_properties(self,
                           path,
                           store_file='upload-keystore.jks',
                           store_password='hunter2',
                           key_alias='upload',
                           key_password='hunter3'):
    with safe_open(path, 'w') as fp:
      fp.write(textwrap.dedent(
      """
      storePassword={0}
      keyPassword={1}
      keyAlias={2}
      storeFile={3}
      """).format(store_password, key_password, key_alias, store_file))

  def test_resolve_properties_file(self):
    with self.project() as (root, app_dir):
      self.write_key_properties(os.path.join(root, 'key.properties'))
      resolution = KeyResolver(root, working_dir=app_dir, environ={}).resolve(PropertiesFileMode())
      self.assertTrue(resolution.found)
      self.assertEqual(resolution.warnings, [])
      self.assertEqual(resolution.identity,
                       Keystore(keystore_location=os.path.join(root, 'upload-keystore.jks'),
                                keystore_password='hunter2',
                                keystore_alias='upload',
                                key_password='hunter3'))

  def test_default_properties_file_is_above_working_dir(self):
    with self.project() as (root, app_dir):
      resolver = KeyResolver(root, working_dir=app_dir)
      self.assertEqual(resolver.default_properties_file(), os.path.join(root, 'key.properties'))

  def test_working_dir_defaults_to_project_root(self):
    with self.project() as (root, _):
      self.assertEqual(KeyResolver(root).working_dir, root)

  def test_relative_properties_file(self):
    with self.project() as (root, app_dir):
      self.write_key_properties(os.path.join(app_dir, 'signing', 'release.properties'),
                                key_alias='relative')
      mode = PropertiesFileMode(os.path.join('signing', 'release.properties'))
      resolution = KeyResolver(root, working_dir=app_dir, environ={}).resolve(mode)
      self.assertEqual(resolution.identity.keystore_alias, 'relative')

  def test_round_trip(self):
    values = {
      'storeFile': os.path.join('keys', 'release.jks'),
      'storePassword': ' s3cr3t:with=separators ',
      'keyAlias': 'release\\2026',
      'keyPassword': '#not-a-comment! 50% ',
    }
    with self.project() as (root, app_dir):
      PropertiesFile.write(os.path.join(root, 'key.properties'), values)
      identity = KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode()).identity
      self.assertEqual(identity.keystore_location, os.path.join(root, values['storeFile']))
      self.assertEqual(identity.keystore_password, values['storePassword'])
      self.assertEqual(identity.keystore_alias, values['keyAlias'])
      self.assertEqual(identity.key_password, values['keyPassword'])

  def test_absolute_store_file(self):
    with self.project() as (root, app_dir):
      with temporary_dir() as keys:
        location = os.path.join(keys, 'upload.jks')
        self.write_key_properties(os.path.join(root, 'key.properties'), store_file=location)
        identity = KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode()).identity
        self.assertEqual(identity.keystore_location, location)

  def test_missing_properties_file(self):
    with self.project() as (root, app_dir):
      resolution = KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode())
      self.assertFalse(resolution.found)
      self.assertIsNone(resolution.identity)
      self.assertEqual(len(resolution.warnings), 1)
      warning = resolution.warnings[0]
      self.assertIsInstance(warning, KeyResolver.MissingCredentialFileWarning)
      self.assertIn(os.path.join(root, 'key.properties'), str(warning))

  def test_missing_properties_file_is_logged(self):
    with self.project() as (root, app_dir):
      with self.assertLogs('releasekeys.key_resolver', level='WARNING'):
        KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode())

  def test_a_missing_key(self):
    for key in KeyResolver.REQUIRED_PROPERTIES:
      with self.project() as (root, app_dir):
        path = os.path.join(root, 'key.properties')
        values = {'storeFile': 'a.jks', 'storePassword': 'b', 'keyAlias': 'c', 'keyPassword': 'd'}
        del values[key]
        PropertiesFile.write(path, values)
        with self.assertRaises(KeyResolver.MalformedCredentialsError) as cm:
          KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode())
        self.assertIn(key, str(cm.exception))

  def test_an_empty_value(self):
    with self.project() as (root, app_dir):
      self.write_key_properties(os.path.join(root, 'key.properties'), key_alias='')
      with self.assertRaises(KeyResolver.MalformedCredentialsError):
        KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode())

  def test_unparseable_properties_file(self):
    with self.project() as (root, app_dir):
      with safe_open(os.path.join(root, 'key.properties'), 'w') as fp:
        fp.write('storeFile=upload.jks\nstoreFile=other.jks\n')
      with self.assertRaises(KeyResolver.MalformedCredentialsError):
        KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode())

  def test_flutter_style_properties_file(self):
    with self.project() as (root, app_dir):
      with safe_open(os.path.join(root, 'key.properties'), 'w') as fp:
        fp.write('storePassword=ab\\\\cd\n'
                 '  keyPassword=hunter3\n'
                 '  keyAlias=upload\n'
                 '  storeFile=C:\\\\Users\\\\dev\\\\upload.jks\n')
      identity = KeyResolver(root, working_dir=app_dir).resolve(PropertiesFileMode()).identity
      self.assertEqual(identity.keystore_password, 'ab\\cd')
      self.assertEqual(identity.key_password, 'hunter3')
      self.assertEqual(identity.keystore_alias, 'upload')
      self.assertTrue(identity.keystore_location.endswith('C:\\Users\\dev\\upload.jks'))

  def test_malformed_credentials_is_a_resolver_error(self):
    self.assertTrue(issubclass(KeyResolver.MalformedCredentialsError, KeyResolver.Error))

  def test_resolve_environment_legacy_layout(self):
    with self.project() as (root, _):
      environ = {
        'KEY_ALIAS': 'upload',
        'KEY_PASSWORD': 'hunter2',
        'KEY_PROPERTIES_PATH': '/ci/secrets/upload.jks',
      }
      identity = KeyResolver(root, environ=environ).resolve(EnvironmentMode(LEGACY_LAYOUT)).identity
      self.assertEqual(identity.keystore_location, '/ci/secrets/upload.jks')
      self.assertEqual(identity.keystore_alias, 'upload')
      self.assertEqual(identity.keystore_password, 'hunter2')
      self.assertEqual(identity.key_password, 'hunter2')
      self.assertEqual(identity.build_type, 'release')

  def test_resolve_environment_android_layout(self):
    with self.project() as (root, _):
      environ = {
        'ANDROID_KEYSTORE_PASSWORD': 'store-pw',
        'ANDROID_KEY_ALIAS': 'upload',
        'ANDROID_KEY_PASSWORD': 'key-pw',
      }
      resolution = KeyResolver(root, environ=environ).resolve(EnvironmentMode(ANDROID_LAYOUT))
      self.assertEqual(resolution.warnings, [])
      self.assertEqual(resolution.identity,
                       Keystore(keystore_location=os.path.join(root, 'app', 'upload-keystore.jks'),
                                keystore_password='store-pw',
                                keystore_alias='upload',
                                key_password='key-pw'))

  def test_environment_keystore_file_override(self):
    with self.project() as (root, _):
      mode = EnvironmentMode(ANDROID_LAYOUT, keystore_file='release.jks')
      identity = KeyResolver(root, environ={}).resolve(mode).identity
      self.assertEqual(identity.keystore_location, os.path.join(root, 'release.jks'))

  def test_environment_keystore_path_expands_home(self):
    with self.project() as (root, _):
      with temporary_dir() as home:
        environ = {'KEY_PROPERTIES_PATH': os.path.join('~', 'keys', 'upload.jks')}
        with environment_as(HOME=home):
          resolver = KeyResolver(root, environ=environ)
          identity = resolver.resolve(EnvironmentMode(LEGACY_LAYOUT)).identity
        self.assertEqual(identity.keystore_location, os.path.join(home, 'keys', 'upload.jks'))

  def test_unset_environment_values_are_empty(self):
    with self.project() as (root, _):
      resolution = KeyResolver(root, environ={'KEY_ALIAS': 'upload'}).resolve(
        EnvironmentMode(LEGACY_LAYOUT))
      self.assertTrue(resolution.found)
      self.assertEqual(resolution.identity.keystore_location, '')
      self.assertEqual(resolution.identity.missing_fields(),
                       ['keystore_location', 'keystore_password', 'key_password'])

  def test_defaults_to_process_environment(self):
    with self.project() as (root, _):
      with environment_as(ANDROID_KEYSTORE_PASSWORD='from-env',
                          ANDROID_KEY_ALIAS='env-alias',
                          ANDROID_KEY_PASSWORD=None):
        identity = KeyResolver(root).resolve(EnvironmentMode(ANDROID_LAYOUT)).identity
      self.assertEqual(identity.keystore_password, 'from-env')
      self.assertEqual(identity.keystore_alias, 'env-alias')
      self.assertEqual(identity.key_password, '')

  def test_unknown_mode(self):
    with self.project() as (root, _):
      with self.assertRaises(KeyResolver.Error):
        KeyResolver(root).resolve(ResolutionMode())

  def test_debug_build_uses_debug_keystore(self):
    with self.project() as (root, app_dir):
      resolver = KeyResolver(root, working_dir=app_dir, homedir='/home/builder')
      resolution = resolver.resolve_for_build('debug', PropertiesFileMode())
      self.assertEqual(resolution.identity.build_type, 'debug')
      self.assertEqual(resolution.identity.keystore_location,
                       os.path.join('/home/builder', '.android', 'debug.keystore'))
      self.assertEqual(resolution.identity.keystore_alias, Keystore.DEBUG_KEYSTORE_ALIAS)
      self.assertEqual(resolution.warnings, [])

  def test_release_build(self):
    with self.project() as (root, app_dir):
      self.write_key_properties(os.path.join(root, 'key.properties'))
      resolution = KeyResolver(root, working_dir=app_dir).resolve_for_build('Release',
                                                                            PropertiesFileMode())
      self.assertEqual(resolution.identity.build_type, 'release')
      self.assertEqual(resolution.identity.keystore_alias, 'upload')

  def test_release_build_without_fallback(self):
    with self.project() as (root, app_dir):
      resolution = KeyResolver(root, working_dir=app_dir).resolve_for_build('release',
                                                                            PropertiesFileMode())
      self.assertFalse(resolution.found)
      self.assertEqual(len(resolution.warnings), 1)

  def test_release_build_with_debug_fallback(self):
    with self.project() as (root, app_dir):
      resolution = KeyResolver(root, working_dir=app_dir, homedir='/home/builder').resolve_for_build(
        'release', PropertiesFileMode(), debug_fallback=True)
      self.assertTrue(resolution.found)
      self.assertEqual(resolution.identity, Keystore.debug_keystore(homedir='/home/builder'))
      self.assertIsInstance(resolution.warnings[0], KeyResolver.MissingCredentialFileWarning)

  def test_bad_build_type(self):
    with self.project() as (root, _):
      with self.assertRaises(ValueError):
        KeyResolver(root).resolve_for_build('bad-build-type', PropertiesFileMode())


class TestResolution(unittest.TestCase):

  def test_empty_resolution(self):
    resolution = Resolution()
    self.assertFalse(resolution.found)
    self.assertEqual(resolution.warnings, [])
